"""Tests for the value model and path resolution."""

from datetime import date

import pytest

from smartform.template.paths import (
    NOT_FOUND,
    PathStep,
    resolve_path,
    root_name,
    split_path,
)
from smartform.template.values import (
    is_truthy,
    stringify,
    to_number,
    to_value,
    type_name,
    values_equal,
)


# =============================================================================
# Value Model Tests
# =============================================================================


class TestToValue:
    """Tests for normalizing host objects into template values."""

    def test_integers_widen_to_float(self):
        result = to_value(10)
        assert result == 10.0
        assert isinstance(result, float)

    def test_booleans_are_not_widened(self):
        assert to_value(True) is True

    def test_tuples_and_nested_mappings(self):
        assert to_value((1, {"a": 2})) == [1.0, {"a": 2.0}]

    def test_dates_become_iso_strings(self):
        assert to_value(date(2024, 1, 2)) == "2024-01-02"

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            to_value(object())


class TestToNumber:
    """Tests for the single numeric coercion."""

    def test_numbers_pass_through(self):
        assert to_number(3.5) == 3.5
        assert to_number(4) == 4.0

    def test_numeric_strings_parse(self):
        assert to_number("42") == 42.0
        assert to_number(" 3.5 ") == 3.5
        assert to_number("1e3") == 1000.0

    def test_booleans_rejected(self):
        with pytest.raises(ValueError):
            to_number(True)

    def test_non_numeric_string_rejected(self):
        with pytest.raises(ValueError, match="not numeric"):
            to_number("abc")

    def test_null_rejected(self):
        with pytest.raises(ValueError):
            to_number(None)


class TestTruthinessAndEquality:
    def test_falsy_values(self):
        for value in (None, False, 0.0, ""):
            assert is_truthy(value) is False

    def test_truthy_values(self):
        for value in (True, 1.0, "0", [], {}):
            assert is_truthy(value) is True

    def test_bool_is_not_equal_to_number(self):
        assert values_equal(True, 1.0) is False

    def test_nested_equality(self):
        assert values_equal([1.0, {"a": "x"}], [1, {"a": "x"}])
        assert not values_equal({"a": 1.0}, {"b": 1.0})


class TestStringify:
    def test_scalars(self):
        assert stringify(None) == ""
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify(15.0) == "15"
        assert stringify(3.14) == "3.14"
        assert stringify("text") == "text"

    def test_collections_render_as_compact_json(self):
        assert stringify([1.0, "a"]) == '[1,"a"]'
        assert stringify({"a": 1.5}) == '{"a":1.5}'


class TestTypeName:
    def test_type_labels(self):
        assert type_name(None) == "null"
        assert type_name(True) == "boolean"
        assert type_name(1.0) == "number"
        assert type_name("s") == "string"
        assert type_name({}) == "object"
        assert type_name([]) == "array"
        assert type_name([1.0]) == "array<number>"
        assert type_name([{"a": 1}]) == "array<object>"


# =============================================================================
# Path Resolution Tests
# =============================================================================


class TestSplitPath:
    def test_fields_and_indexes(self):
        assert split_path("a.b[2].c") == [
            PathStep(key="a"),
            PathStep(key="b"),
            PathStep(index=2),
            PathStep(key="c"),
        ]

    def test_multiple_indexes(self):
        assert split_path("matrix[1][2]") == [
            PathStep(key="matrix"),
            PathStep(index=1),
            PathStep(index=2),
        ]

    def test_malformed_paths(self):
        assert split_path("") is None
        assert split_path("a..b") is None
        assert split_path("a[x]") is None

    def test_root_name(self):
        assert root_name("items[0].name") == "items"
        assert root_name("user.name") == "user"
        assert root_name("flag") == "flag"


class TestResolvePath:
    @pytest.fixture
    def data(self):
        return {
            "user": {"addresses": [{"city": "Paris"}, {"city": "Lyon"}]},
            "matrix": [[1.0, 2.0], [3.0, 4.0]],
            "empty": None,
        }

    def test_nested_access(self, data):
        assert resolve_path(data, "user.addresses[1].city") == "Lyon"
        assert resolve_path(data, "matrix[1][0]") == 3.0

    def test_present_null_is_found(self, data):
        assert resolve_path(data, "empty") is None

    def test_out_of_range_is_not_found(self, data):
        assert resolve_path(data, "user.addresses[5].city") is NOT_FOUND

    def test_wrong_shapes_are_not_found(self, data):
        assert resolve_path(data, "user[0]") is NOT_FOUND
        assert resolve_path(data, "matrix.size") is NOT_FOUND
        assert resolve_path(data, "empty.field") is NOT_FOUND
        assert resolve_path(data, "missing") is NOT_FOUND

    def test_malformed_path_is_not_found(self, data):
        assert resolve_path(data, "user..addresses") is NOT_FOUND
