"""Error types for the SmartForm template engine.

Two families of errors exist:
- Parse errors (LexerError, ParseError) are raised before any evaluation
  happens and mean the expression text itself is invalid.
- Evaluation errors (EvaluationError and subclasses) are raised per call
  and are recoverable by the caller.
"""


class TemplateError(Exception):
    """Base class for all template engine errors.

    Attributes:
        message: Human-readable message without position context
        position: Character offset in the expression, if known
        expression: The expression text the error refers to, if known
    """

    def __init__(
        self,
        message: str,
        position: int | None = None,
        expression: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """Return the message with a caret pointing at the error position."""
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class ParseError(TemplateError):
    """Error during parsing of a template or expression."""
    pass


class LexerError(ParseError):
    """Error during tokenization of an expression."""
    pass


class EvaluationError(TemplateError):
    """Error during evaluation of a parsed expression."""
    pass


class VariableNotFoundError(EvaluationError):
    """A variable path resolved neither in the context nor in the registry."""

    def __init__(self, path: str):
        super().__init__(f"variable not found: {path}")
        self.path = path


class FunctionNotFoundError(EvaluationError):
    """A function call referenced a name that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"function not found: {name}")
        self.function_name = name


class FunctionCallError(EvaluationError):
    """A registered function raised while being invoked."""

    def __init__(self, function_name: str, message: str):
        super().__init__(f"{function_name}: {message}")
        self.function_name = function_name
