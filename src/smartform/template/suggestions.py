"""Autocomplete suggestions for template editors.

Suggestions are derived by walking every registered variable (objects
contribute one suggestion per key, arrays an example ``[0]`` access) and
listing every registered function with its signature. A partial expression
typed by the user is then used to filter that list.
"""

import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from smartform.template.registry import VariableRegistry
from smartform.template.values import Value, type_name

logger = logging.getLogger(__name__)

MAX_SAMPLE_KEYS = 3
MAX_SAMPLE_STRING = 20
TRUNCATION_MARKER = "..."

_ELEMENT_MEMBER = re.compile(r"^(.+\[\d+\])\.$")


class ArrayInfo(BaseModel):
    """How to reach the elements of an array variable."""

    model_config = ConfigDict(populate_by_name=True)

    item_type: str = Field(alias="itemType")
    sample_access: str = Field(alias="sampleAccess")


class VariableSuggestion(BaseModel):
    """A single autocomplete entry (variable path or function)."""

    model_config = ConfigDict(populate_by_name=True)

    expr: str
    type: str
    description: str = ""
    value: Any = None
    children: list[str] = Field(default_factory=list)
    is_nested: bool = Field(default=False, alias="isNested")
    array_info: ArrayInfo | None = Field(default=None, alias="arrayInfo")
    is_function: bool = Field(default=False, alias="isFunction")
    signature: str | None = None


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------


def sample_value(value: Value) -> Value:
    """Shrink a value for display next to a suggestion.

    Arrays keep a sample of their first element, objects their first three
    keys, and long strings their first twenty characters.
    """
    if isinstance(value, list):
        if not value:
            return []
        return [sample_value(value[0]), TRUNCATION_MARKER]
    if isinstance(value, dict):
        keys = list(value)[:MAX_SAMPLE_KEYS]
        return {key: sample_value(value[key]) for key in keys}
    if isinstance(value, str) and len(value) > MAX_SAMPLE_STRING:
        return value[:MAX_SAMPLE_STRING] + TRUNCATION_MARKER
    return value


def generate_suggestions(registry: VariableRegistry) -> list[VariableSuggestion]:
    """Build the full suggestion list for a registry.

    Variables come first, sorted by name and each followed by its nested
    paths; functions follow, sorted by name.
    """
    suggestions: list[VariableSuggestion] = []

    variables = registry.variables()
    for name in sorted(variables):
        value = variables[name]
        root = VariableSuggestion(
            expr=name,
            type=type_name(value),
            description=f"{name} variable",
            value=sample_value(value),
        )
        suggestions.append(root)
        suggestions.extend(_nested_suggestions(root, value))

    for func_def in registry.list_functions():
        suggestions.append(
            VariableSuggestion(
                expr=func_def.name,
                type="function",
                description=func_def.description,
                is_function=True,
                signature=func_def.signature,
            )
        )

    return suggestions


def _nested_suggestions(parent: VariableSuggestion, value: Value) -> list[VariableSuggestion]:
    """Suggestions below parent; fills in parent.children and parent.array_info."""
    results: list[VariableSuggestion] = []

    if isinstance(value, dict):
        parent.children = sorted(value)
        for key in parent.children:
            child_value = value[key]
            child = VariableSuggestion(
                expr=f"{parent.expr}.{key}",
                type=type_name(child_value),
                description=f"Property of {parent.expr}",
                value=sample_value(child_value),
                is_nested=True,
            )
            results.append(child)
            results.extend(_nested_suggestions(child, child_value))

    elif isinstance(value, list) and value:
        first = value[0]
        element = VariableSuggestion(
            expr=f"{parent.expr}[0]",
            type=type_name(first),
            description=f"First element of {parent.expr} array",
            value=sample_value(first),
            is_nested=True,
        )
        parent.array_info = ArrayInfo(item_type=element.type, sample_access=element.expr)
        results.append(element)
        results.extend(_nested_suggestions(element, first))

    elif value is not None and not isinstance(value, (bool, float, int, str, list)):
        logger.warning("Skipping unsupported value of type %s at %s", type(value).__name__, parent.expr)

    return results


# -----------------------------------------------------------------------------
# Filtering
# -----------------------------------------------------------------------------


def filter_suggestions(
    suggestions: list[VariableSuggestion], partial: str
) -> list[VariableSuggestion]:
    """Narrow suggestions to what fits after the partial expression.

    Args:
        suggestions: Full list from generate_suggestions
        partial: Text typed so far, with or without the leading ``${``

    Returns:
        Matching suggestions; everything when partial is empty
    """
    if partial.startswith("${"):
        partial = partial[2:]

    if not partial:
        return list(suggestions)

    # Inside a function call: complete the current argument
    if "(" in partial:
        paren = partial.rindex("(")
        comma = partial.rfind(",")
        if comma > paren:
            return _by_prefix(suggestions, partial[comma + 1:].strip())
        if paren == len(partial) - 1:
            return [s for s in suggestions if not s.is_function]
        return _by_prefix(suggestions, partial[paren + 1:].strip())

    # Member of an array element: items[0].
    match = _ELEMENT_MEMBER.match(partial)
    if match:
        base = match.group(1)
        prefix = f"{base}."
        results = [
            s for s in suggestions
            if s.expr.startswith(prefix) and not any(c in s.expr[len(prefix):] for c in ".[")
        ]
        results.append(
            VariableSuggestion(
                expr=f"{base}.property",
                type="any",
                description=f"Access a property of {base}",
                is_nested=True,
            )
        )
        return results

    # Member of an object, or element of an array: user.
    if partial.endswith("."):
        object_path = partial[:-1]
        by_expr = {s.expr: s for s in suggestions}
        parent = by_expr.get(object_path)

        if parent is not None and parent.type == "object":
            return [
                by_expr[f"{object_path}.{child}"]
                for child in parent.children
                if f"{object_path}.{child}" in by_expr
            ]

        if parent is not None and parent.array_info is not None:
            return [
                VariableSuggestion(
                    expr=parent.array_info.sample_access,
                    type=parent.array_info.item_type,
                    description=f"Array element access example for {object_path} (use a specific index)",
                    is_nested=True,
                )
            ]

    return _by_prefix(suggestions, partial)


def _by_prefix(suggestions: list[VariableSuggestion], prefix: str) -> list[VariableSuggestion]:
    """Suggestions whose expression starts with prefix, ranked.

    Exact matches come first, then variables before functions, then
    shallower paths, then alphabetical order.
    """
    matches = [s for s in suggestions if s.expr.startswith(prefix)]
    return sorted(
        matches,
        key=lambda s: (
            s.expr != prefix,
            s.is_function,
            s.expr.count(".") + s.expr.count("["),
            s.expr,
        ),
    )
