"""Function metadata for the SmartForm template engine.

Functions are callable from templates (e.g., ``${concat(first, ' ', last)}``).
Each function is registered with metadata so that editors can show
signatures and descriptions next to variable suggestions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class FunctionCategory(Enum):
    """Groups used by the `functions` listing and suggestion metadata."""

    STRING = "string"
    MATH = "math"
    ARRAY = "array"
    CONVERSION = "conversion"
    NULL = "null"
    DATE = "date"
    LOGIC = "logic"
    COMPARISON = "comparison"
    CUSTOM = "custom"


@dataclass
class FunctionParameter:
    """One declared argument of a template function.

    Attributes:
        name: Parameter name
        type: Value type label such as "number", "string" or "any"
        description: What the argument means
        required: False renders the parameter as [name] in signatures
        variadic: Accepts any number of trailing values, rendered as "name, ..."
    """

    name: str
    type: str
    description: str
    required: bool = True
    variadic: bool = False


@dataclass
class FunctionDefinition:
    """Complete definition of a template function.

    Attributes:
        name: Function name as used in templates
        description: One-line summary shown in suggestions
        category: Listing group
        parameters: Declared arguments in call order
        return_type: Value type label of the result
        examples: Example templates using this function
        implementation: The Python callable, invoked with positional values
    """

    name: str
    description: str
    category: FunctionCategory
    parameters: list[FunctionParameter]
    return_type: str
    examples: list[str] = field(default_factory=list)
    implementation: Callable[..., Any] | None = None

    @classmethod
    def custom(cls, name: str, implementation: Callable[..., Any]) -> "FunctionDefinition":
        """Build minimal metadata for a function registered without any."""
        return cls(
            name=name,
            description="Custom function",
            category=FunctionCategory.CUSTOM,
            parameters=[],
            return_type="any",
            implementation=implementation,
        )

    @property
    def signature(self) -> str:
        """Human-readable call signature, e.g. ``substring(string, start, [end])``."""
        if not self.parameters and self.category == FunctionCategory.CUSTOM:
            return f"{self.name}(...)"

        rendered = []
        for param in self.parameters:
            if param.variadic:
                rendered.append(f"{param.name}, ...")
            elif not param.required:
                rendered.append(f"[{param.name}]")
            else:
                rendered.append(param.name)
        return f"{self.name}({', '.join(rendered)})"

    def to_dict(self) -> dict[str, Any]:
        """Export for documentation output."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "signature": self.signature,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type,
                    "description": p.description,
                    "required": p.required,
                    "variadic": p.variadic,
                }
                for p in self.parameters
            ],
            "returnType": self.return_type,
            "examples": self.examples,
        }
