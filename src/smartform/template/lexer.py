"""Lexer/tokenizer for the SmartForm expression language.

Converts the text inside a ``${...}`` placeholder into a stream of tokens
for the parser.

Token types:
- Literal values: NUMBER, STRING, BOOLEAN, NULL
- Identifiers: IDENTIFIER (variable roots, path fields, function names)
- Operators: comparison (== != < <= > >=), QUESTION, COALESCE (??), MINUS
- Punctuation: LPAREN, RPAREN, LBRACKET, RBRACKET, COMMA, DOT, COLON
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from smartform.template.errors import LexerError


class TokenType(Enum):
    """Kinds of token produced inside a placeholder."""

    # Literals
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    NULL = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Comparison operators
    EQ = auto()          # ==
    NEQ = auto()         # !=
    LT = auto()          # <
    LTE = auto()         # <=
    GT = auto()          # >
    GTE = auto()         # >=

    # Conditional operators
    QUESTION = auto()    # ?
    COALESCE = auto()    # ??
    COLON = auto()       # :

    # Sign for negative number literals
    MINUS = auto()       # -

    # Punctuation
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    LBRACKET = auto()    # [
    RBRACKET = auto()    # ]
    COMMA = auto()       # ,
    DOT = auto()         # .

    # End of input
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """One lexed unit of a placeholder expression.

    Attributes:
        type: The token type
        value: Parsed float, unescaped string, bool, None or the raw lexeme
        position: Offset of the first character within the placeholder text
    """

    type: TokenType
    value: str | float | bool | None
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


# Tried in order and the first match wins, so `??` and the two-character
# comparisons come before their one-character prefixes
TOKEN_PATTERNS = [
    # Whitespace (skip)
    (r"\s+", None),

    # Two-character operators
    (r"\?\?", TokenType.COALESCE),
    (r"==", TokenType.EQ),
    (r"!=", TokenType.NEQ),
    (r"<=", TokenType.LTE),
    (r">=", TokenType.GTE),

    # One-character operators
    (r"<", TokenType.LT),
    (r">", TokenType.GT),
    (r"\?", TokenType.QUESTION),
    (r":", TokenType.COLON),
    (r"-", TokenType.MINUS),

    # Punctuation
    (r"\(", TokenType.LPAREN),
    (r"\)", TokenType.RPAREN),
    (r"\[", TokenType.LBRACKET),
    (r"\]", TokenType.RBRACKET),
    (r",", TokenType.COMMA),
    (r"\.", TokenType.DOT),

    # Numbers (integer, decimal, exponent)
    (r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?", TokenType.NUMBER),

    # Quoted strings with backslash escapes
    (r'"([^"\\]|\\.)*"', TokenType.STRING),
    (r"'([^'\\]|\\.)*'", TokenType.STRING),

    # Identifiers; true, false and null are promoted through KEYWORDS
    (r"[a-zA-Z_][a-zA-Z0-9_]*", TokenType.IDENTIFIER),
]

# Keywords that map to literal token types
KEYWORDS = {
    "true": (TokenType.BOOLEAN, True),
    "false": (TokenType.BOOLEAN, False),
    "null": (TokenType.NULL, None),
}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_COMPILED_PATTERNS = [
    (re.compile(pattern), token_type) for pattern, token_type in TOKEN_PATTERNS
]


class Lexer:
    """Tokenizer for the expression language.

    Usage:
        lexer = Lexer("user.age >= 18 ? 'adult' : 'minor'")
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def next_token(self) -> Token:
        """Lex one token, skipping leading whitespace."""
        while True:
            if self.position >= len(self.source):
                return Token(TokenType.EOF, None, self.position)

            for pattern, token_type in _COMPILED_PATTERNS:
                match = pattern.match(self.source, self.position)
                if match:
                    break
            else:
                self._raise_unexpected()

            value = match.group()
            start_pos = self.position
            self.position = match.end()

            # Skip whitespace
            if token_type is None:
                continue

            if token_type == TokenType.NUMBER:
                return Token(token_type, float(value), start_pos)

            if token_type == TokenType.STRING:
                return Token(token_type, self._unescape_string(value[1:-1]), start_pos)

            if token_type == TokenType.IDENTIFIER and value in KEYWORDS:
                keyword_type, keyword_value = KEYWORDS[value]
                return Token(keyword_type, keyword_value, start_pos)

            return Token(token_type, value, start_pos)

    def _raise_unexpected(self) -> None:
        char = self.source[self.position]
        if char in ("'", '"'):
            raise LexerError(
                f"Unterminated string literal at position {self.position}",
                self.position,
                self.source,
            )
        raise LexerError(
            f"Unexpected character '{char}' at position {self.position}",
            self.position,
            self.source,
        )

    def _unescape_string(self, s: str) -> str:
        """Resolve backslash escapes; unknown escapes keep the escaped character."""
        result = []
        i = 0
        while i < len(s):
            if s[i] == "\\" and i + 1 < len(s):
                next_char = s[i + 1]
                result.append(_ESCAPES.get(next_char, next_char))
                i += 2
            else:
                result.append(s[i])
                i += 1
        return "".join(result)

    def tokenize(self) -> list[Token]:
        """Return every token, EOF included."""
        return list(self)


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize an expression string."""
    return Lexer(source).tokenize()
