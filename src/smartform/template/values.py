"""Value model for the SmartForm template engine.

Every value flowing through evaluation is one of:
- None
- bool
- float (integers are widened on the way in)
- str
- list of values
- dict of str -> value

This module holds the conversions shared by the evaluator, the standard
function library and the suggestion generator: normalization into the
value model, numeric coercion, truthiness, equality and stringification.
"""

import json
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

Value = None | bool | float | str | list | dict

_NUMERIC_STRING = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def to_value(value: Any) -> Value:
    """Normalize a host Python object into the value model.

    Integers and decimals become floats, tuples become lists, mappings become
    dicts with string keys, and dates become ISO-8601 strings.

    Raises:
        TypeError: If the object has no representation in the value model
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, float):
        return value
    if isinstance(value, (int, Decimal)):
        return float(value)
    if isinstance(value, (list, tuple)):
        return [to_value(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): to_value(item) for key, item in value.items()}
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"unsupported value type: {type(value).__name__}")


def is_number(value: Any) -> bool:
    """Return True for numeric values. Booleans are not numbers."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def to_number(value: Any) -> float:
    """Coerce a value to a float.

    This is the single coercion used by every arithmetic and comparison
    function: numbers pass through, numeric strings are parsed, anything
    else fails.

    Raises:
        ValueError: If the value is not numeric
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if _NUMERIC_STRING.match(text):
            return float(text)
        raise ValueError(
            f"string value '{value}' is not numeric and cannot be converted to a number"
        )
    raise ValueError(
        f"value {stringify(value)!r} (type {type_name(value)}) is not numeric "
        "and cannot be converted to a number"
    )


def try_number(value: Any) -> float | None:
    """Return the numeric form of value, or None when it is not numeric."""
    try:
        return to_number(value)
    except ValueError:
        return None


def is_truthy(value: Any) -> bool:
    """Apply the engine's truthiness rules.

    0, "", None and False are falsy; everything else is truthy, including
    empty lists and dicts.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def is_blank(value: Any) -> bool:
    """Return True for None and the empty string."""
    return value is None or value == ""


def values_equal(left: Any, right: Any) -> bool:
    """Exact value equality without cross-type coercion.

    Unlike Python's ``==``, True is not equal to 1.0.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return float(left) == float(right)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(
            values_equal(left[key], right[key]) for key in left
        )
    if type(left) is not type(right):
        return False
    return left == right


def type_name(value: Any) -> str:
    """Return the type label used in errors and suggestions."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        if value:
            return f"array<{type_name(value[0])}>"
        return "array"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (datetime, date)):
        return "date"
    return type(value).__name__


def format_number(value: float) -> str:
    """Format a number the way templates print it (15.0 -> "15")."""
    if math.isfinite(value) and float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def stringify(value: Any) -> str:
    """Convert a value to its template string form.

    None renders as the empty string, booleans as true/false, integral
    numbers without a fraction, and lists/dicts as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(float(value))
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, Mapping)):
        return json.dumps(to_plain(value), separators=(",", ":"), ensure_ascii=False)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_plain(value: Any) -> Any:
    """Prepare a value for JSON output with integral floats as ints."""
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if is_number(value):
        number = float(value)
        if math.isfinite(number) and number.is_integer() and abs(number) < 1e21:
            return int(number)
        return number
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    return stringify(value)
