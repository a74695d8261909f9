"""Tests for autocomplete suggestion generation and filtering."""

import pytest

from smartform.template import TemplateEngine, generate_suggestions
from smartform.template.suggestions import sample_value


@pytest.fixture
def engine():
    engine = TemplateEngine()
    engine.register_variable(
        "customer",
        {
            "name": "Ada Lovelace",
            "address": {"city": "London", "zip": "N1"},
            "orders": [{"id": 1, "total": 9.5}],
        },
    )
    engine.register_variable("flag", True)
    return engine


def by_expr(suggestions):
    return {s.expr: s for s in suggestions}


# =============================================================================
# Generation Tests
# =============================================================================


class TestGeneration:
    def test_nested_paths(self, engine):
        exprs = [s.expr for s in generate_suggestions(engine.registry)]

        for expected in (
            "customer",
            "customer.address",
            "customer.address.city",
            "customer.orders",
            "customer.orders[0]",
            "customer.orders[0].id",
            "flag",
            "add",
        ):
            assert expected in exprs

    def test_object_children_rollup(self, engine):
        customer = by_expr(generate_suggestions(engine.registry))["customer"]

        assert customer.type == "object"
        assert customer.description == "customer variable"
        assert customer.children == ["address", "name", "orders"]
        assert customer.is_nested is False

    def test_array_info(self, engine):
        suggestions = by_expr(generate_suggestions(engine.registry))
        orders = suggestions["customer.orders"]

        assert orders.type == "array<object>"
        assert orders.array_info.item_type == "object"
        assert orders.array_info.sample_access == "customer.orders[0]"
        assert suggestions["customer.orders[0].total"].type == "number"
        assert suggestions["customer.orders[0].total"].is_nested is True

    def test_function_suggestions(self, engine):
        substring = by_expr(generate_suggestions(engine.registry))["substring"]

        assert substring.is_function is True
        assert substring.type == "function"
        assert substring.signature == "substring(string, startIndex, [endIndex])"

    def test_custom_function_without_metadata(self, engine):
        engine.register_function("double", lambda x: x * 2)

        double = by_expr(generate_suggestions(engine.registry))["double"]
        assert double.signature == "double(...)"
        assert double.description == "Custom function"

    def test_variables_before_functions(self, engine):
        suggestions = generate_suggestions(engine.registry)
        kinds = [s.is_function for s in suggestions]

        assert kinds == sorted(kinds)

    def test_long_string_sample_truncated(self, engine):
        engine.register_variable("bio", "x" * 30)

        bio = by_expr(generate_suggestions(engine.registry))["bio"]
        assert bio.value == "x" * 20 + "..."

    def test_camel_case_serialization(self, engine):
        orders = by_expr(generate_suggestions(engine.registry))["customer.orders"]
        data = orders.model_dump(by_alias=True)

        assert data["isNested"] is True
        assert data["isFunction"] is False
        assert data["arrayInfo"] == {
            "itemType": "object",
            "sampleAccess": "customer.orders[0]",
        }


class TestSampleValue:
    def test_string_truncation(self):
        assert sample_value("a" * 25) == "a" * 20 + "..."
        assert sample_value("a" * 20) == "a" * 20

    def test_object_keeps_three_keys(self):
        assert sample_value({"a": 1.0, "b": 2.0, "c": 3.0, "d": 4.0}) == {
            "a": 1.0,
            "b": 2.0,
            "c": 3.0,
        }

    def test_array_sample(self):
        assert sample_value([1.0, 2.0]) == [1.0, "..."]
        assert sample_value([]) == []


# =============================================================================
# Filtering Tests
# =============================================================================


class TestFiltering:
    def test_empty_partial_returns_everything(self, engine):
        assert len(engine.get_expression_suggestions("")) == len(
            generate_suggestions(engine.registry)
        )

    def test_prefix_ranked_shallow_first(self, engine):
        suggestions = engine.get_expression_suggestions("${cust")

        assert all(s.expr.startswith("cust") for s in suggestions)
        assert suggestions[0].expr == "customer"

    def test_object_members(self, engine):
        exprs = [s.expr for s in engine.get_expression_suggestions("customer.")]

        assert exprs == ["customer.address", "customer.name", "customer.orders"]

    def test_array_element_example(self, engine):
        suggestions = engine.get_expression_suggestions("customer.orders.")

        assert [s.expr for s in suggestions] == ["customer.orders[0]"]
        assert suggestions[0].type == "object"

    def test_array_element_members(self, engine):
        suggestions = engine.get_expression_suggestions("customer.orders[0].")
        exprs = [s.expr for s in suggestions]

        assert exprs == [
            "customer.orders[0].id",
            "customer.orders[0].total",
            "customer.orders[0].property",
        ]
        assert suggestions[-1].type == "any"

    def test_open_call_offers_variables(self, engine):
        suggestions = engine.get_expression_suggestions("concat(")

        assert suggestions
        assert not any(s.is_function for s in suggestions)

    def test_argument_prefix(self, engine):
        exprs = [s.expr for s in engine.get_expression_suggestions("concat(customer.na")]
        assert exprs == ["customer.name"]

    def test_argument_after_comma(self, engine):
        exprs = [s.expr for s in engine.get_expression_suggestions("concat(a, fl")]
        assert exprs == ["flag", "floor"]

    def test_function_prefix(self, engine):
        exprs = [s.expr for s in engine.get_expression_suggestions("sub")]
        assert exprs == ["substring", "subtract"]
