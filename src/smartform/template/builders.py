"""Helpers for building template strings in code.

Arguments are expression source text and are inserted verbatim; use
``quote`` to turn plain text into a string literal.

Example:
    ternary("user.age >= 18", quote("adult"), quote("minor"))
    # "${user.age >= 18 ? \"adult\" : \"minor\"}"
"""


def quote(text: str) -> str:
    """Return text as a double-quoted string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def template_expression(expression: str) -> str:
    """Wrap an expression in a ``${...}`` placeholder."""
    return "${" + expression + "}"


def variable_ref(path: str) -> str:
    return template_expression(path)


def function_call(name: str, *args: str) -> str:
    return template_expression(f"{name}({', '.join(args)})")


def conditional_value(condition: str, true_value: str, false_value: str) -> str:
    """Build an ``if(condition, trueValue, falseValue)`` call."""
    return function_call("if", condition, true_value, false_value)


def format_value(format_string: str, *args: str) -> str:
    """Build a ``format(...)`` call; the format string is quoted for you."""
    return function_call("format", quote(format_string), *args)


def for_each(item_var: str, collection: str, body: str) -> str:
    return template_expression(f"forEach({item_var}, {collection}, {body})")


def for_each_with_index(item_var: str, index_var: str, collection: str, body: str) -> str:
    return template_expression(
        f"forEach({item_var}, {index_var}, {collection}, {body})"
    )


def ternary(condition: str, true_value: str, false_value: str) -> str:
    return template_expression(f"{condition} ? {true_value} : {false_value}")


def null_coalesce(value: str, default_value: str) -> str:
    return template_expression(f"{value} ?? {default_value}")


def array_access(array: str, index: int) -> str:
    return template_expression(f"{array}[{index}]")
