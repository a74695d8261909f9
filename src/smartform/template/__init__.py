"""Template expression engine for SmartForm.

This module provides:
- TemplateEngine: Parses, caches and evaluates ``${...}`` templates
- VariableRegistry: Global variables and functions available to templates
- Lexer/Parser: Turn template text into a tree of parts
- Evaluator: Evaluates parts against a per-call context
- Suggestions: Autocomplete entries derived from the registry
"""

from smartform.template.cache import ExpressionCache
from smartform.template.engine import TemplateEngine, is_template_expression
from smartform.template.errors import (
    EvaluationError,
    FunctionCallError,
    FunctionNotFoundError,
    LexerError,
    ParseError,
    TemplateError,
    VariableNotFoundError,
)
from smartform.template.evaluator import EvaluationContext, Evaluator, evaluate
from smartform.template.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
)
from smartform.template.lexer import Lexer, Token, TokenType, tokenize
from smartform.template.parser import (
    ForEachPart,
    FunctionPart,
    LiteralPart,
    NullCoalescePart,
    Parser,
    Part,
    TemplateExpression,
    TextPart,
    VariablePart,
    parse_expression,
    parse_template,
)
from smartform.template.paths import NOT_FOUND, resolve_path, root_name, split_path
from smartform.template.registry import VariableRegistry
from smartform.template.suggestions import (
    ArrayInfo,
    VariableSuggestion,
    filter_suggestions,
    generate_suggestions,
)
from smartform.template.values import Value, stringify, to_number, to_value

__all__ = [
    # Engine
    "ExpressionCache",
    "TemplateEngine",
    "is_template_expression",
    # Errors
    "EvaluationError",
    "FunctionCallError",
    "FunctionNotFoundError",
    "LexerError",
    "ParseError",
    "TemplateError",
    "VariableNotFoundError",
    # Evaluator
    "EvaluationContext",
    "Evaluator",
    "evaluate",
    # Functions
    "FunctionCategory",
    "FunctionDefinition",
    "FunctionParameter",
    "VariableRegistry",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "ForEachPart",
    "FunctionPart",
    "LiteralPart",
    "NullCoalescePart",
    "Parser",
    "Part",
    "TemplateExpression",
    "TextPart",
    "VariablePart",
    "parse_expression",
    "parse_template",
    # Paths
    "NOT_FOUND",
    "resolve_path",
    "root_name",
    "split_path",
    # Suggestions
    "ArrayInfo",
    "VariableSuggestion",
    "filter_suggestions",
    "generate_suggestions",
    # Values
    "Value",
    "stringify",
    "to_number",
    "to_value",
]
