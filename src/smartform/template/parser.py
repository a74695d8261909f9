"""Parser for SmartForm template expressions.

A template is arbitrary text with ``${...}`` placeholders. The text between
placeholders becomes TextPart nodes; the inside of each placeholder is
tokenized and parsed into a tree of parts using recursive descent parsing
with operator precedence.

Binding, loosest first:
1. ?: (ternary, right-associative, desugars to if(cond, a, b))
2. ?? (null-coalescing, right-associative)
3. == != < <= > >= (one comparison per level, desugars to eq/ne/lt/lte/gt/gte)
4. () (function call, forEach), . and [n] (variable paths), literals, grouping
"""

import re
from dataclasses import dataclass, replace
from typing import Any

from smartform.template.errors import LexerError, ParseError
from smartform.template.lexer import Lexer, Token, TokenType


# -----------------------------------------------------------------------------
# AST Node Types
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Part:
    """Base class for template parts (AST nodes)."""
    pass


@dataclass(frozen=True)
class TextPart(Part):
    """Static text outside of any placeholder."""
    text: str


@dataclass(frozen=True)
class LiteralPart(Part):
    """A constant: float, string, bool or None."""
    value: Any


@dataclass(frozen=True)
class VariablePart(Part):
    """A variable reference by dotted/bracketed path (e.g., user.addresses[0].city)."""
    path: str


@dataclass(frozen=True)
class FunctionPart(Part):
    """Function call (e.g., concat(a, b)). Operators desugar to these too."""
    name: str
    args: tuple[Part, ...] = ()


@dataclass(frozen=True)
class NullCoalescePart(Part):
    """Null-coalescing operation (left ?? right)."""
    left: Part
    right: Part


@dataclass(frozen=True)
class ForEachPart(Part):
    """Loop construct: forEach(item, [index,] collection, body)."""
    item_var: str
    collection: Part
    body: Part
    index_var: str | None = None


@dataclass(frozen=True)
class TemplateExpression:
    """A parsed template.

    Attributes:
        raw: The original template string
        parts: Parsed parts in source order; empty only when raw is empty
    """

    raw: str
    parts: tuple[Part, ...]


# Comparison operators and the functions they desugar to
COMPARISON_FUNCTIONS = {
    TokenType.GT: "gt",
    TokenType.LT: "lt",
    TokenType.GTE: "gte",
    TokenType.LTE: "lte",
    TokenType.EQ: "eq",
    TokenType.NEQ: "ne",
}

PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")

_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Keywords are lexed as literals but are valid property names after '.'
_MEMBER_TOKENS = (TokenType.IDENTIFIER, TokenType.BOOLEAN, TokenType.NULL)

# Tokens that may follow a complete coalesce operand
_OPERAND_END = (
    TokenType.COALESCE,
    TokenType.QUESTION,
    TokenType.COLON,
    TokenType.COMMA,
    TokenType.RPAREN,
    TokenType.EOF,
)


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------


class Parser:
    """Recursive descent parser for a single placeholder expression.

    Usage:
        parser = Parser("user.age > 18 ? 'adult' : 'minor'")
        part = parser.parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens = self._tokenize()
        self.position = 0

    def _tokenize(self) -> list[Token]:
        """Tokenize the source.

        Text that cannot be lexed before the first ``??`` is replaced by a
        null token so that ``user.na$ ?? 'x'`` still yields the fallback.
        """
        try:
            return Lexer(self.source).tokenize()
        except LexerError as e:
            split_at = self.source.find("??")
            if split_at == -1 or e.position is None or e.position > split_at:
                raise
            tail = Lexer(self.source[split_at:]).tokenize()
            return [Token(TokenType.NULL, None, 0)] + [
                replace(token, position=token.position + split_at) for token in tail
            ]

    def parse(self) -> Part:
        """Parse the expression and return the root part."""
        if self._is_at_end():
            raise ParseError("Empty expression", 0, self.source)

        part = self._parse_ternary()

        if not self._is_at_end():
            raise self._error(f"Unexpected token '{self._describe(self._current())}'")

        return part

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        """Get current token."""
        if self.position >= len(self.tokens):
            return Token(TokenType.EOF, None, len(self.source))
        return self.tokens[self.position]

    def _peek(self, offset: int = 1) -> Token:
        """Look ahead by offset tokens; EOF past the end."""
        pos = self.position + offset
        if pos >= len(self.tokens):
            return Token(TokenType.EOF, None, len(self.source))
        return self.tokens[pos]

    def _is_at_end(self) -> bool:
        """Return True once only EOF remains."""
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Return the current token and move past it."""
        token = self._current()
        self.position += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Return True if the current token is one of types."""
        return self._current().type in types

    def _consume(self, token_type: TokenType, message: str) -> Token:
        """Advance past a token of token_type or raise ParseError with message."""
        if self._current().type == token_type:
            return self._advance()
        raise self._error(message)

    def _error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self._current()
        return ParseError(
            f"{message} at position {token.position}", token.position, self.source
        )

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.EOF:
            return "end of expression"
        if token.type == TokenType.STRING:
            return repr(token.value)
        return str(token.value)

    # -------------------------------------------------------------------------
    # Grammar rules, loosest binding first
    # -------------------------------------------------------------------------

    def _parse_ternary(self) -> Part:
        """Parse ternary expression (lowest precedence)."""
        condition = self._parse_coalesce()

        if not self._match(TokenType.QUESTION):
            return condition

        self._advance()
        when_true = self._parse_ternary()
        self._consume(TokenType.COLON, "Expected ':' in ternary expression")
        when_false = self._parse_ternary()

        return FunctionPart("if", (condition, when_true, when_false))

    def _parse_coalesce(self) -> Part:
        """Parse null-coalescing expression (a ?? b).

        A left operand that fails to parse is replaced by a null literal so
        that partially typed expressions such as ``user. ?? 'none'`` or
        ``items[ ?? 'none'`` still produce the fallback. Everything up to the
        first ``??`` counts as the left operand, unclosed brackets included.
        """
        start = self.position
        try:
            left = self._parse_comparison()
            if not self._match(*_OPERAND_END):
                raise self._error(f"Unexpected token '{self._describe(self._current())}'")
        except ParseError:
            coalesce_at = self._find_coalesce(start)
            if coalesce_at is None:
                raise
            self.position = coalesce_at
            left = LiteralPart(None)

        if not self._match(TokenType.COALESCE):
            return left

        self._advance()
        right = self._parse_coalesce()
        return NullCoalescePart(left, right)

    def _find_coalesce(self, start: int) -> int | None:
        """Return the index of the first '??' token at or after start."""
        for index in range(start, len(self.tokens)):
            if self.tokens[index].type == TokenType.COALESCE:
                return index
        return None

    def _parse_comparison(self) -> Part:
        """Parse comparison expression (==, !=, <, <=, >, >=)."""
        left = self._parse_primary()

        if self._current().type not in COMPARISON_FUNCTIONS:
            return left

        op_token = self._advance()
        right = self._parse_primary()

        if self._current().type in COMPARISON_FUNCTIONS:
            raise self._error("Chained comparisons are not supported")

        return FunctionPart(COMPARISON_FUNCTIONS[op_token.type], (left, right))

    def _parse_primary(self) -> Part:
        """Parse primary expression (literals, paths, calls, grouped expressions)."""
        token = self._current()

        # Literals
        if token.type in (
            TokenType.NUMBER,
            TokenType.STRING,
            TokenType.BOOLEAN,
            TokenType.NULL,
        ):
            self._advance()
            return LiteralPart(token.value)

        # Negative number literal
        if token.type == TokenType.MINUS:
            self._advance()
            number = self._consume(TokenType.NUMBER, "Expected number after '-'")
            return LiteralPart(-number.value)

        # Grouped expression
        if token.type == TokenType.LPAREN:
            self._advance()
            part = self._parse_ternary()
            self._consume(TokenType.RPAREN, "Expected ')' after expression")
            return part

        # Function call, loop or variable path
        if token.type == TokenType.IDENTIFIER:
            if self._peek().type == TokenType.LPAREN:
                self._advance()
                self._consume(TokenType.LPAREN, "Expected '(' after function name")
                if token.value == "forEach":
                    return self._parse_for_each(token)
                return FunctionPart(str(token.value), tuple(self._parse_arguments()))
            return self._parse_path()

        raise self._error(f"Unexpected token '{self._describe(token)}'")

    def _parse_path(self) -> VariablePart:
        """Parse a variable path such as user.addresses[0].street."""
        segments = [str(self._advance().value)]

        while True:
            if self._match(TokenType.DOT):
                self._advance()
                member = self._current()
                if member.type not in _MEMBER_TOKENS:
                    raise self._error("Expected property name after '.'")
                self._advance()
                segments.append(f".{_lexeme(member)}")

            elif self._match(TokenType.LBRACKET):
                self._advance()
                index = self._current()
                if index.type != TokenType.NUMBER or not float(index.value).is_integer():
                    raise self._error("Array index must be a non-negative integer")
                self._advance()
                self._consume(TokenType.RBRACKET, "Expected ']' after index")
                segments.append(f"[{int(index.value)}]")

            else:
                break

        return VariablePart("".join(segments))

    def _parse_arguments(self) -> list[Part]:
        """Parse a call's arguments (opening parenthesis already consumed)."""
        arguments: list[Part] = []

        if not self._match(TokenType.RPAREN):
            arguments.append(self._parse_ternary())

            while self._match(TokenType.COMMA):
                self._advance()
                arguments.append(self._parse_ternary())

        self._consume(TokenType.RPAREN, "Expected ')' after arguments")

        return arguments

    def _parse_for_each(self, name_token: Token) -> ForEachPart:
        """Parse forEach(item, [index,] collection, body)."""
        arguments = self._parse_arguments()

        if len(arguments) < 3:
            raise self._error(
                "forEach requires at least 3 arguments: itemVar, collection, body",
                name_token,
            )
        if len(arguments) > 4:
            raise self._error(
                "forEach accepts at most 4 arguments: itemVar, indexVar, collection, body",
                name_token,
            )

        item_var = _loop_variable(arguments[0])
        if item_var is None:
            raise self._error("forEach item variable must be an identifier", name_token)

        if len(arguments) == 3:
            return ForEachPart(item_var, arguments[1], arguments[2])

        index_var = _loop_variable(arguments[1])
        if index_var is None:
            raise self._error("forEach index variable must be an identifier", name_token)

        return ForEachPart(item_var, arguments[2], arguments[3], index_var)


def _lexeme(token: Token) -> str:
    """Return the source spelling of an identifier or keyword token."""
    if token.type == TokenType.NULL:
        return "null"
    if token.type == TokenType.BOOLEAN:
        return "true" if token.value else "false"
    return str(token.value)


def _loop_variable(part: Part) -> str | None:
    """Return the bare identifier a loop argument names, if it is one."""
    if isinstance(part, VariablePart) and _IDENTIFIER.match(part.path):
        return part.path
    return None


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def parse_expression(source: str) -> Part:
    """Parse the inside of a single placeholder.

    Args:
        source: Expression text without the surrounding ``${`` and ``}``

    Returns:
        The root part

    Raises:
        ParseError: If the expression is malformed
    """
    return Parser(source).parse()


def parse_template(raw: str) -> TemplateExpression:
    """Parse a template string containing zero or more placeholders.

    Example:
        parse_template("Hello, ${name}!")
        # TemplateExpression(raw="Hello, ${name}!", parts=(
        #     TextPart("Hello, "), VariablePart("name"), TextPart("!")))
    """
    parts: list[Part] = []
    last_end = 0

    for match in PLACEHOLDER_PATTERN.finditer(raw):
        if match.start() > last_end:
            parts.append(TextPart(raw[last_end:match.start()]))
        parts.append(parse_expression(match.group(1)))
        last_end = match.end()

    if last_end < len(raw):
        parts.append(TextPart(raw[last_end:]))

    return TemplateExpression(raw=raw, parts=tuple(parts))
