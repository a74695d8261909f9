"""Standard functions for the SmartForm template engine.

This module registers the standard library with a VariableRegistry. Each
implementation receives the evaluated arguments positionally and returns a
template value; any exception it raises is reported by the evaluator as a
FunctionCallError naming the function.

Categories:
- Comparison: eq, ne, gt, lt, gte, lte
- Logic: if, and, or, not
- Math: add, subtract, multiply, divide, mod, round, abs, floor, ceil, min, max
- String: concat, format, length, substring, toLower, toUpper, trim,
  contains, startsWith, endsWith, replace
- Array: join, first, last, count
- Conversion: toString, toNumber, toBool
- Null handling: default, coalesce, isEmpty
- Date: now, today, formatDate, addDays, daysBetween
"""

import math
import operator
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import TYPE_CHECKING, Any, Callable

from smartform.template.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
)
from smartform.template.values import (
    Value,
    is_blank,
    is_number,
    is_truthy,
    stringify,
    to_number,
    try_number,
    type_name,
    values_equal,
)

if TYPE_CHECKING:
    from smartform.template.registry import VariableRegistry


def register_standard_functions(registry: "VariableRegistry") -> None:
    """Register all standard functions with the given registry."""
    _register_comparison_functions(registry)
    _register_logic_functions(registry)
    _register_math_functions(registry)
    _register_string_functions(registry)
    _register_array_functions(registry)
    _register_conversion_functions(registry)
    _register_null_functions(registry)
    _register_date_functions(registry)


# -----------------------------------------------------------------------------
# Comparison Functions
# -----------------------------------------------------------------------------


def _eq(left: Value, right: Value) -> bool:
    """Numeric equality when both sides are numeric, exact equality otherwise."""
    left_number, right_number = try_number(left), try_number(right)
    if left_number is not None and right_number is not None:
        return left_number == right_number
    return values_equal(left, right)


def _ne(left: Value, right: Value) -> bool:
    return not _eq(left, right)


def _ordering(compare: Callable[[Any, Any], bool]) -> Callable[[Value, Value], bool]:
    """Build an ordering comparison: numbers first, then strings."""

    def _compare(left: Value, right: Value) -> bool:
        left_number, right_number = try_number(left), try_number(right)
        if left_number is not None and right_number is not None:
            return compare(left_number, right_number)
        if isinstance(left, str) and isinstance(right, str):
            return compare(left, right)
        raise ValueError(
            f"cannot compare {type_name(left)} and {type_name(right)} "
            "(values are neither both numeric nor both strings)"
        )

    return _compare


_gt = _ordering(operator.gt)
_lt = _ordering(operator.lt)
_gte = _ordering(operator.ge)
_lte = _ordering(operator.le)


def _register_comparison_functions(registry: "VariableRegistry") -> None:
    operands = [
        FunctionParameter("value1", "any", "First value"),
        FunctionParameter("value2", "any", "Second value"),
    ]

    for name, description, implementation, example in (
        ("eq", "Checks if two values are equal", _eq, "eq(status, 'active')"),
        ("ne", "Checks if two values are not equal", _ne, "ne(role, 'guest')"),
        ("gt", "Checks if the first value is greater than the second", _gt, "gt(age, 18)"),
        ("lt", "Checks if the first value is less than the second", _lt, "lt(quantity, 10)"),
        ("gte", "Checks if the first value is greater than or equal to the second", _gte, "gte(score, 50)"),
        ("lte", "Checks if the first value is less than or equal to the second", _lte, "lte(total, budget)"),
    ):
        registry.register_definition(
            FunctionDefinition(
                name=name,
                description=description,
                category=FunctionCategory.COMPARISON,
                parameters=list(operands),
                return_type="boolean",
                examples=[example],
                implementation=implementation,
            )
        )


# -----------------------------------------------------------------------------
# Logic Functions
# -----------------------------------------------------------------------------


def condition_value(value: Value) -> bool:
    """Interpret the condition argument of ``if``.

    Lists and dicts are rejected rather than treated as truthy.
    """
    if isinstance(value, (list, dict)):
        raise ValueError(f"condition must be a boolean, got {type_name(value)}")
    return is_truthy(value)


def _if(condition: Value, true_value: Value, false_value: Value) -> Value:
    """Return true_value if condition is truthy, else false_value."""
    return true_value if condition_value(condition) else false_value


def _and(*values: Value) -> bool:
    """Return True if every value is truthy (True for no values)."""
    return all(is_truthy(v) for v in values)


def _or(*values: Value) -> bool:
    """Return True if any value is truthy (False for no values)."""
    return any(is_truthy(v) for v in values)


def _not(value: Value) -> bool:
    return not is_truthy(value)


def _register_logic_functions(registry: "VariableRegistry") -> None:
    registry.register_definition(
        FunctionDefinition(
            name="if",
            description="Returns trueValue if condition is truthy, otherwise falseValue",
            category=FunctionCategory.LOGIC,
            parameters=[
                FunctionParameter("condition", "any", "Condition to test"),
                FunctionParameter("trueValue", "any", "Value if condition is truthy"),
                FunctionParameter("falseValue", "any", "Value if condition is falsy"),
            ],
            return_type="any",
            examples=[
                "if(user.isAdmin, 'Admin', 'User')",
                "user.age >= 18 ? 'adult' : 'minor'",
            ],
            implementation=_if,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="and",
            description="Returns true if all values are truthy",
            category=FunctionCategory.LOGIC,
            parameters=[
                FunctionParameter("values", "any", "Values to test", required=False, variadic=True)
            ],
            return_type="boolean",
            examples=["and(user.active, user.verified)"],
            implementation=_and,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="or",
            description="Returns true if any value is truthy",
            category=FunctionCategory.LOGIC,
            parameters=[
                FunctionParameter("values", "any", "Values to test", required=False, variadic=True)
            ],
            return_type="boolean",
            examples=["or(user.isAdmin, user.isOwner)"],
            implementation=_or,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="not",
            description="Returns the logical negation of a value",
            category=FunctionCategory.LOGIC,
            parameters=[
                FunctionParameter("value", "any", "Value to negate")
            ],
            return_type="boolean",
            examples=["not(user.isGuest)"],
            implementation=_not,
        )
    )


# Lazily evaluated by the evaluator when registered under these names
SHORT_CIRCUIT_FUNCTIONS = {"if": _if, "and": _and, "or": _or}


# -----------------------------------------------------------------------------
# Math Functions
# -----------------------------------------------------------------------------


def _add(*values: Value) -> float:
    """Sum two or more numbers."""
    if len(values) < 2:
        raise ValueError("requires at least 2 arguments")
    return math.fsum(to_number(v) for v in values)


def _subtract(minuend: Value, subtrahend: Value) -> float:
    return to_number(minuend) - to_number(subtrahend)


def _multiply(*values: Value) -> float:
    """Multiply two or more numbers."""
    if len(values) < 2:
        raise ValueError("requires at least 2 arguments")
    return math.prod(to_number(v) for v in values)


def _divide(dividend: Value, divisor: Value) -> float:
    denominator = to_number(divisor)
    if denominator == 0:
        raise ValueError("division by zero")
    return to_number(dividend) / denominator


def _mod(dividend: Value, divisor: Value) -> float:
    """Remainder with the sign of the dividend."""
    denominator = to_number(divisor)
    if denominator == 0:
        raise ValueError("modulo by zero")
    return math.fmod(to_number(dividend), denominator)


def _round(value: Value, decimals: Value = 0.0) -> float:
    """Round half away from zero to the given number of decimals."""
    places = int(to_number(decimals))
    number = Decimal(repr(to_number(value)))
    # Nothing to round when the float already has no more decimals than asked
    if not number.is_finite() or -number.as_tuple().exponent <= places:
        return float(number)

    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def _abs(value: Value) -> float:
    return abs(to_number(value))


def _floor(value: Value) -> float:
    return float(math.floor(to_number(value)))


def _ceil(value: Value) -> float:
    return float(math.ceil(to_number(value)))


def _min(*values: Value) -> float:
    """Return the smallest of one or more numbers."""
    if not values:
        raise ValueError("requires at least 1 argument")
    return min(to_number(v) for v in values)


def _max(*values: Value) -> float:
    """Return the largest of one or more numbers."""
    if not values:
        raise ValueError("requires at least 1 argument")
    return max(to_number(v) for v in values)


def _register_math_functions(registry: "VariableRegistry") -> None:
    registry.register_definition(
        FunctionDefinition(
            name="add",
            description="Adds two or more numbers",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("number1", "number", "First number"),
                FunctionParameter("number2", "number", "Further numbers", variadic=True),
            ],
            return_type="number",
            examples=["add(price, tax)", "add(a, b, c)"],
            implementation=_add,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="subtract",
            description="Subtracts the second number from the first",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("number1", "number", "Number to subtract from"),
                FunctionParameter("number2", "number", "Number to subtract"),
            ],
            return_type="number",
            examples=["subtract(total, discount)"],
            implementation=_subtract,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="multiply",
            description="Multiplies two or more numbers",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("number1", "number", "First number"),
                FunctionParameter("number2", "number", "Further numbers", variadic=True),
            ],
            return_type="number",
            examples=["multiply(quantity, unitPrice)"],
            implementation=_multiply,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="divide",
            description="Divides the first number by the second",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("dividend", "number", "Number to divide"),
                FunctionParameter("divisor", "number", "Number to divide by (non-zero)"),
            ],
            return_type="number",
            examples=["divide(total, count)"],
            implementation=_divide,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="mod",
            description="Returns the remainder of dividing the first number by the second",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("dividend", "number", "Number to divide"),
                FunctionParameter("divisor", "number", "Number to divide by (non-zero)"),
            ],
            return_type="number",
            examples=["mod(index, 2) == 0"],
            implementation=_mod,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="round",
            description="Rounds a number to the given decimal places (half away from zero)",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("number", "number", "Number to round"),
                FunctionParameter("decimals", "number", "Decimal places (default 0)", required=False),
            ],
            return_type="number",
            examples=["round(price, 2)", "round(average)"],
            implementation=_round,
        )
    )

    for name, description, implementation in (
        ("abs", "Returns the absolute value of a number", _abs),
        ("floor", "Rounds a number down to the nearest integer", _floor),
        ("ceil", "Rounds a number up to the nearest integer", _ceil),
    ):
        registry.register_definition(
            FunctionDefinition(
                name=name,
                description=description,
                category=FunctionCategory.MATH,
                parameters=[FunctionParameter("number", "number", "Input number")],
                return_type="number",
                examples=[f"{name}(balance)"],
                implementation=implementation,
            )
        )

    registry.register_definition(
        FunctionDefinition(
            name="min",
            description="Returns the smallest of the given numbers",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("numbers", "number", "Numbers to compare", variadic=True)
            ],
            return_type="number",
            examples=["min(requested, available)"],
            implementation=_min,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="max",
            description="Returns the largest of the given numbers",
            category=FunctionCategory.MATH,
            parameters=[
                FunctionParameter("numbers", "number", "Numbers to compare", variadic=True)
            ],
            return_type="number",
            examples=["max(0, balance)"],
            implementation=_max,
        )
    )


# -----------------------------------------------------------------------------
# String Functions
# -----------------------------------------------------------------------------


def _concat(*values: Value) -> str:
    """Concatenate all arguments as strings."""
    return "".join(stringify(v) for v in values)


def _format_argument(value: Value) -> Any:
    if is_number(value):
        number = float(value)
        return int(number) if number.is_integer() else number
    if isinstance(value, str):
        return value
    return stringify(value)


def _format(format_string: Value, *values: Value) -> str:
    """printf-style formatting, e.g. format('%s has %d items', name, n)."""
    return stringify(format_string) % tuple(_format_argument(v) for v in values)


def _length(value: Value) -> float:
    """Return length of a string, array or object, 0 for null."""
    if value is None:
        return 0.0
    if isinstance(value, (str, list, dict)):
        return float(len(value))
    raise ValueError(f"cannot get length of {type_name(value)}")


def _substring(value: Value, start: Value, end: Value = None) -> str:
    """Slice a string; indexes are clamped to the string bounds."""
    text = stringify(value)
    begin = min(max(int(to_number(start)), 0), len(text))
    finish = len(text) if end is None else min(max(int(to_number(end)), 0), len(text))
    if finish < begin:
        return ""
    return text[begin:finish]


def _to_lower(value: Value) -> str:
    return stringify(value).lower()


def _to_upper(value: Value) -> str:
    return stringify(value).upper()


def _trim(value: Value) -> str:
    return stringify(value).strip()


def _contains(haystack: Value, needle: Value) -> bool:
    """Test if a string contains a substring or an array contains an item."""
    if haystack is None:
        return False
    if isinstance(haystack, list):
        return any(_eq(item, needle) for item in haystack)
    return stringify(needle) in stringify(haystack)


def _starts_with(value: Value, prefix: Value) -> bool:
    if value is None:
        return False
    return stringify(value).startswith(stringify(prefix))


def _ends_with(value: Value, suffix: Value) -> bool:
    if value is None:
        return False
    return stringify(value).endswith(stringify(suffix))


def _replace(value: Value, old: Value, new: Value) -> str:
    return stringify(value).replace(stringify(old), stringify(new))


def _register_string_functions(registry: "VariableRegistry") -> None:
    registry.register_definition(
        FunctionDefinition(
            name="concat",
            description="Concatenates all arguments as strings",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("value1", "any", "First value"),
                FunctionParameter("value2", "any", "Further values", variadic=True),
            ],
            return_type="string",
            examples=[
                "concat(user.firstName, ' ', user.lastName)",
                "concat(city, ', ', state)",
            ],
            implementation=_concat,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="format",
            description="Formats values using a printf-style format string",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("formatString", "string", "Format string (%s, %d, %.2f)"),
                FunctionParameter("value", "any", "Values to format", required=False, variadic=True),
            ],
            return_type="string",
            examples=["format('%s has %d items', user.name, count(cart.items))"],
            implementation=_format,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="length",
            description="Returns the length of a string, array or object",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("value", "string|array|object", "The value to measure")
            ],
            return_type="number",
            examples=["length(user.name) > 0"],
            implementation=_length,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="substring",
            description="Extracts part of a string between two indexes",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("string", "string", "Source string"),
                FunctionParameter("startIndex", "number", "Start index (inclusive)"),
                FunctionParameter("endIndex", "number", "End index (exclusive)", required=False),
            ],
            return_type="string",
            examples=["substring(code, 0, 3)"],
            implementation=_substring,
        )
    )

    for name, description, implementation, example in (
        ("toLower", "Converts a string to lowercase", _to_lower, "toLower(user.email)"),
        ("toUpper", "Converts a string to uppercase", _to_upper, "toUpper(countryCode)"),
        ("trim", "Removes whitespace from both ends of a string", _trim, "trim(comment)"),
    ):
        registry.register_definition(
            FunctionDefinition(
                name=name,
                description=description,
                category=FunctionCategory.STRING,
                parameters=[FunctionParameter("string", "string", "The string to convert")],
                return_type="string",
                examples=[example],
                implementation=implementation,
            )
        )

    registry.register_definition(
        FunctionDefinition(
            name="contains",
            description="Tests if a string contains a substring or an array contains an item",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("value", "string|array", "String or array to search"),
                FunctionParameter("search", "any", "Substring or item to find"),
            ],
            return_type="boolean",
            examples=["contains(user.email, '@')", "contains(roles, 'admin')"],
            implementation=_contains,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="startsWith",
            description="Tests if a string starts with a prefix",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("string", "string", "The string to test"),
                FunctionParameter("prefix", "string", "Prefix to check for"),
            ],
            return_type="boolean",
            examples=["startsWith(sku, 'PRD-')"],
            implementation=_starts_with,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="endsWith",
            description="Tests if a string ends with a suffix",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("string", "string", "The string to test"),
                FunctionParameter("suffix", "string", "Suffix to check for"),
            ],
            return_type="boolean",
            examples=["endsWith(email, '@company.com')"],
            implementation=_ends_with,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="replace",
            description="Replaces every occurrence of a substring",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("string", "string", "Source string"),
                FunctionParameter("search", "string", "Substring to replace"),
                FunctionParameter("replacement", "string", "Replacement text"),
            ],
            return_type="string",
            examples=["replace(phone, '-', '')"],
            implementation=_replace,
        )
    )


# -----------------------------------------------------------------------------
# Array Functions
# -----------------------------------------------------------------------------


def _require_array(value: Value) -> list:
    if not isinstance(value, list):
        raise ValueError(f"expected an array, got {type_name(value)}")
    return value


def _join(items: Value, separator: Value = ",") -> str:
    """Join array elements into a string."""
    return stringify(separator).join(stringify(item) for item in _require_array(items))


def _first(items: Value) -> Value:
    """Return the first element, or null for an empty array."""
    if items is None:
        return None
    items = _require_array(items)
    return items[0] if items else None


def _last(items: Value) -> Value:
    """Return the last element, or null for an empty array."""
    if items is None:
        return None
    items = _require_array(items)
    return items[-1] if items else None


def _count(items: Value) -> float:
    if items is None:
        return 0.0
    return float(len(_require_array(items)))


def _register_array_functions(registry: "VariableRegistry") -> None:
    registry.register_definition(
        FunctionDefinition(
            name="join",
            description="Joins array elements with a separator",
            category=FunctionCategory.ARRAY,
            parameters=[
                FunctionParameter("array", "array", "Array to join"),
                FunctionParameter("separator", "string", "Separator (default ',')", required=False),
            ],
            return_type="string",
            examples=["join(tags, ', ')"],
            implementation=_join,
        )
    )

    for name, description, implementation, return_type in (
        ("first", "Returns the first element of an array", _first, "any"),
        ("last", "Returns the last element of an array", _last, "any"),
        ("count", "Returns the number of elements in an array", _count, "number"),
    ):
        registry.register_definition(
            FunctionDefinition(
                name=name,
                description=description,
                category=FunctionCategory.ARRAY,
                parameters=[FunctionParameter("array", "array", "Input array")],
                return_type=return_type,
                examples=[f"{name}(order.items)"],
                implementation=implementation,
            )
        )


# -----------------------------------------------------------------------------
# Conversion Functions
# -----------------------------------------------------------------------------


def _to_bool(value: Value) -> bool:
    """Convert to boolean: 'true', 'yes' and '1' strings and nonzero numbers are true."""
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return False


def _register_conversion_functions(registry: "VariableRegistry") -> None:
    for name, description, implementation, return_type in (
        ("toString", "Converts a value to a string", stringify, "string"),
        ("toNumber", "Converts a value to a number", to_number, "number"),
        ("toBool", "Converts a value to a boolean", _to_bool, "boolean"),
    ):
        registry.register_definition(
            FunctionDefinition(
                name=name,
                description=description,
                category=FunctionCategory.CONVERSION,
                parameters=[FunctionParameter("value", "any", "Value to convert")],
                return_type=return_type,
                examples=[f"{name}(form.quantity)"],
                implementation=implementation,
            )
        )


# -----------------------------------------------------------------------------
# Null Handling Functions
# -----------------------------------------------------------------------------


def _default(value: Value, fallback: Value) -> Value:
    """Return fallback when value is null or the empty string."""
    return fallback if is_blank(value) else value


def _coalesce(*values: Value) -> Value:
    """Return the first value that is neither null nor empty, else the last."""
    if not values:
        raise ValueError("requires at least 1 argument")
    for value in values:
        if not is_blank(value):
            return value
    return values[-1]


def _is_empty(value: Value) -> bool:
    """Return True for null, blank strings, and empty arrays or objects."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def _register_null_functions(registry: "VariableRegistry") -> None:
    registry.register_definition(
        FunctionDefinition(
            name="default",
            description="Returns the fallback if the value is null or empty",
            category=FunctionCategory.NULL,
            parameters=[
                FunctionParameter("value", "any", "Value to check"),
                FunctionParameter("defaultValue", "any", "Fallback value"),
            ],
            return_type="any",
            examples=["default(user.nickname, user.firstName)"],
            implementation=_default,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="coalesce",
            description="Returns the first non-null, non-empty value",
            category=FunctionCategory.NULL,
            parameters=[
                FunctionParameter("value1", "any", "First candidate"),
                FunctionParameter("value2", "any", "Further candidates", variadic=True),
            ],
            return_type="any",
            examples=["coalesce(user.mobile, user.phone, 'n/a')"],
            implementation=_coalesce,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="isEmpty",
            description="Returns true if value is null, blank, or an empty array or object",
            category=FunctionCategory.NULL,
            parameters=[
                FunctionParameter("value", "any", "The value to check")
            ],
            return_type="boolean",
            examples=["isEmpty(user.middleName)"],
            implementation=_is_empty,
        )
    )


# -----------------------------------------------------------------------------
# Date Functions
# -----------------------------------------------------------------------------

# Accepted date string layouts, tried in order. The flag marks date-only layouts.
DATE_FORMATS = (
    ("%Y-%m-%dT%H:%M:%S%z", False),
    ("%Y-%m-%dT%H:%M:%S.%f%z", False),
    ("%a, %d %b %Y %H:%M:%S %Z", False),
    ("%Y-%m-%d", True),
    ("%Y-%m-%d %H:%M:%S", False),
    ("%Y-%m-%dT%H:%M:%S", False),
    ("%Y-%m-%dT%H:%M:%S.%f", False),
)

DEFAULT_DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: Value) -> tuple[datetime, bool]:
    """Parse a date string.

    Returns:
        Tuple of (parsed datetime, whether the input was date-only)

    Raises:
        ValueError: If no accepted layout matches
    """
    if not isinstance(value, str):
        raise ValueError(f"expected a date string, got {type_name(value)}")

    text = value.strip()
    for layout, date_only in DATE_FORMATS:
        try:
            return datetime.strptime(text, layout), date_only
        except ValueError:
            continue
    raise ValueError(f"unable to parse date: {value}")


def _now() -> str:
    """Return current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _today() -> str:
    """Return the current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


def _format_date(value: Value, layout: Value = DEFAULT_DATE_FORMAT) -> str:
    parsed, _ = parse_date(value)
    return parsed.strftime(stringify(layout))


def _add_days(value: Value, days: Value) -> str:
    """Add days to a date, keeping the input's shape."""
    parsed, date_only = parse_date(value)
    shifted = parsed + timedelta(days=int(to_number(days)))
    if date_only:
        return shifted.date().isoformat()
    return shifted.isoformat()


def _days_between(start: Value, end: Value) -> float:
    """Return the number of calendar days from start to end."""
    start_date, _ = parse_date(start)
    end_date, _ = parse_date(end)
    return float((end_date.date() - start_date.date()).days)


def _register_date_functions(registry: "VariableRegistry") -> None:
    registry.register_definition(
        FunctionDefinition(
            name="now",
            description="Returns the current UTC time as an ISO-8601 string",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="string",
            examples=["formatDate(now(), '%H:%M')"],
            implementation=_now,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="today",
            description="Returns the current date as YYYY-MM-DD",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="string",
            examples=["daysBetween(today(), order.dueDate)"],
            implementation=_today,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="formatDate",
            description="Formats a date using a strftime pattern",
            category=FunctionCategory.DATE,
            parameters=[
                FunctionParameter("date", "string", "Date string"),
                FunctionParameter("format", "string", "strftime pattern (default %Y-%m-%d)", required=False),
            ],
            return_type="string",
            examples=["formatDate(order.createdAt, '%d/%m/%Y')"],
            implementation=_format_date,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="addDays",
            description="Adds days to a date (negative to subtract)",
            category=FunctionCategory.DATE,
            parameters=[
                FunctionParameter("date", "string", "Date string"),
                FunctionParameter("days", "number", "Days to add"),
            ],
            return_type="string",
            examples=["addDays(today(), 30)", "addDays(dueDate, -7)"],
            implementation=_add_days,
        )
    )

    registry.register_definition(
        FunctionDefinition(
            name="daysBetween",
            description="Returns the number of days between two dates",
            category=FunctionCategory.DATE,
            parameters=[
                FunctionParameter("start", "string", "Start date"),
                FunctionParameter("end", "string", "End date"),
            ],
            return_type="number",
            examples=["daysBetween(startDate, endDate) >= 30"],
            implementation=_days_between,
        )
    )
