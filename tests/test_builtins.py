"""Tests for the standard function library."""

import re
from datetime import datetime, timezone

import pytest

from smartform.template import FunctionCategory, VariableRegistry


@pytest.fixture
def registry():
    registry = VariableRegistry()
    registry.register_standard_functions()
    return registry


@pytest.fixture
def call(registry):
    """Call a standard function directly with already-evaluated arguments."""

    def _call(name, *args):
        return registry.get_function(name).implementation(*args)

    return _call


# =============================================================================
# Registration Tests
# =============================================================================


STANDARD_FUNCTIONS = {
    "eq", "ne", "gt", "lt", "gte", "lte",
    "if", "and", "or", "not",
    "add", "subtract", "multiply", "divide", "mod", "round", "abs", "floor", "ceil", "min", "max",
    "concat", "format", "length", "substring", "toLower", "toUpper", "trim",
    "contains", "startsWith", "endsWith", "replace",
    "join", "first", "last", "count",
    "toString", "toNumber", "toBool",
    "default", "coalesce", "isEmpty",
    "now", "today", "formatDate", "addDays", "daysBetween",
}


class TestRegistration:
    def test_all_standard_functions_registered(self, registry):
        names = {f.name for f in registry.list_functions()}
        assert names == STANDARD_FUNCTIONS

    def test_every_function_has_metadata(self, registry):
        for func_def in registry.list_functions():
            assert func_def.description
            assert func_def.examples
            assert func_def.category != FunctionCategory.CUSTOM

    def test_signatures(self, registry):
        assert registry.get_function("substring").signature == "substring(string, startIndex, [endIndex])"
        assert registry.get_function("add").signature == "add(number1, number2, ...)"
        assert registry.get_function("now").signature == "now()"

    def test_list_by_category(self, registry):
        names = [f.name for f in registry.list_functions(FunctionCategory.DATE)]
        assert names == ["addDays", "daysBetween", "formatDate", "now", "today"]

    def test_export_documentation(self, registry):
        docs = registry.export_documentation()

        assert "add" in [f["name"] for f in docs["byCategory"]["math"]]
        assert docs["functions"]["round"]["returnType"] == "number"
        assert docs["functions"]["round"]["parameters"][1]["required"] is False


# =============================================================================
# Math Tests
# =============================================================================


class TestMath:
    def test_arithmetic(self, call):
        assert call("add", 1.0, 2.0, "3") == 6.0
        assert call("subtract", 10.0, 4.0) == 6.0
        assert call("multiply", 2.0, 3.0, 4.0) == 24.0
        assert call("divide", "10", 4.0) == 2.5

    def test_add_requires_two_arguments(self, call):
        with pytest.raises(ValueError, match="at least 2"):
            call("add", 1.0)

    def test_divide_by_zero(self, call):
        with pytest.raises(ValueError, match="division by zero"):
            call("divide", 1.0, 0.0)

    def test_mod_keeps_dividend_sign(self, call):
        assert call("mod", 7.0, 3.0) == 1.0
        assert call("mod", -7.0, 3.0) == -1.0

    def test_mod_by_zero(self, call):
        with pytest.raises(ValueError):
            call("mod", 7.0, 0.0)

    def test_round_half_away_from_zero(self, call):
        assert call("round", 2.5) == 3.0
        assert call("round", -2.5) == -3.0
        assert call("round", 3.14159, 2.0) == 3.14
        assert call("round", 1.005, 2.0) == 1.01

    def test_round_beyond_float_precision(self, call):
        assert call("round", 123.456, 30.0) == 123.456
        assert call("round", 1e22, 2.0) == 1e22
        assert call("round", 1234.5, -2.0) == 1200.0

    def test_unary_math(self, call):
        assert call("abs", -2.0) == 2.0
        assert call("floor", 2.7) == 2.0
        assert call("ceil", 2.1) == 3.0

    def test_min_max(self, call):
        assert call("min", 3.0, "1", 2.0) == 1.0
        assert call("max", 3.0, "1", 2.0) == 3.0
        with pytest.raises(ValueError):
            call("min")

    def test_non_numeric_operand(self, call):
        with pytest.raises(ValueError, match="not numeric"):
            call("add", 1.0, "abc")


# =============================================================================
# String Tests
# =============================================================================


class TestStrings:
    def test_concat(self, call):
        assert call("concat", "a", 1.0, True, None) == "a1true"

    def test_format(self, call):
        assert call("format", "%s has %d items", "Ann", 3.0) == "Ann has 3 items"
        assert call("format", "%.2f", 3.14159) == "3.14"
        assert call("format", "%s", True) == "true"

    def test_length(self, call):
        assert call("length", "abc") == 3.0
        assert call("length", [1.0, 2.0]) == 2.0
        assert call("length", {"a": 1.0}) == 1.0
        assert call("length", None) == 0.0
        with pytest.raises(ValueError):
            call("length", 5.0)

    def test_substring_is_clamped(self, call):
        assert call("substring", "hello", 1.0, 3.0) == "el"
        assert call("substring", "hello", 2.0) == "llo"
        assert call("substring", "hello", -5.0, 100.0) == "hello"
        assert call("substring", "hello", 4.0, 2.0) == ""

    def test_case_and_trim(self, call):
        assert call("toLower", "AbC") == "abc"
        assert call("toUpper", "AbC") == "ABC"
        assert call("trim", "  x  ") == "x"

    def test_contains(self, call):
        assert call("contains", "hello", "ell") is True
        assert call("contains", ["a", "b"], "b") is True
        assert call("contains", [1.0, 2.0], "2") is True
        assert call("contains", None, "x") is False

    def test_prefix_suffix_replace(self, call):
        assert call("startsWith", "PRD-1", "PRD-") is True
        assert call("endsWith", "a@b.com", ".org") is False
        assert call("replace", "a-b-c", "-", "") == "abc"


# =============================================================================
# Array, Conversion and Null Tests
# =============================================================================


class TestArrays:
    def test_join(self, call):
        assert call("join", ["a", 1.0, True], ", ") == "a, 1, true"
        assert call("join", ["a", "b"]) == "a,b"

    def test_join_requires_array(self, call):
        with pytest.raises(ValueError, match="expected an array"):
            call("join", "x", ",")

    def test_first_last_count(self, call):
        assert call("first", []) is None
        assert call("first", ["a", "b"]) == "a"
        assert call("last", [1.0, 2.0]) == 2.0
        assert call("count", ["a"]) == 1.0
        assert call("count", None) == 0.0


class TestConversion:
    def test_to_string(self, call):
        assert call("toString", 15.0) == "15"

    def test_to_number(self, call):
        assert call("toNumber", " 42 ") == 42.0
        with pytest.raises(ValueError):
            call("toNumber", "abc")

    def test_to_bool(self, call):
        assert call("toBool", "yes") is True
        assert call("toBool", "1") is True
        assert call("toBool", "no") is False
        assert call("toBool", 0.0) is False
        assert call("toBool", 2.0) is True


class TestNullHandling:
    def test_default(self, call):
        assert call("default", None, "x") == "x"
        assert call("default", "", "x") == "x"
        assert call("default", 0.0, "x") == 0.0

    def test_coalesce(self, call):
        assert call("coalesce", None, "", "a", "b") == "a"
        assert call("coalesce", None, "") == ""

    def test_is_empty(self, call):
        assert call("isEmpty", "  ") is True
        assert call("isEmpty", []) is True
        assert call("isEmpty", {}) is True
        assert call("isEmpty", 0.0) is False


# =============================================================================
# Date Tests
# =============================================================================


class TestDates:
    def test_now_is_utc_iso(self, call):
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$", call("now"))

    def test_today_is_utc(self, call):
        assert call("today") == datetime.now(timezone.utc).date().isoformat()
        assert call("now")[:10] == call("today")

    @pytest.mark.parametrize(
        "value",
        [
            "2024-03-15",
            "2024-03-15T10:30:00Z",
            "2024-03-15T10:30:00.123+00:00",
            "Fri, 15 Mar 2024 10:30:00 GMT",
            "2024-03-15 10:30:00",
        ],
    )
    def test_accepted_layouts(self, call, value):
        assert call("formatDate", value) == "2024-03-15"

    def test_format_date_pattern(self, call):
        assert call("formatDate", "2024-03-15T10:30:00Z", "%d/%m/%Y %H:%M") == "15/03/2024 10:30"

    def test_unparseable_date(self, call):
        with pytest.raises(ValueError, match="unable to parse date"):
            call("formatDate", "not a date")

    def test_add_days_keeps_shape(self, call):
        assert call("addDays", "2024-01-30", 2.0) == "2024-02-01"
        assert call("addDays", "2024-03-10", -10.0) == "2024-02-29"
        assert call("addDays", "2024-01-30T10:00:00Z", 1.0) == "2024-01-31T10:00:00+00:00"

    def test_days_between(self, call):
        assert call("daysBetween", "2024-01-01", "2024-03-01") == 60.0
        assert call("daysBetween", "2024-03-01", "2024-01-01") == -60.0
