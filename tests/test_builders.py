"""Tests for the template string builders."""

import pytest

from smartform.template import TemplateEngine
from smartform.template.builders import (
    array_access,
    conditional_value,
    for_each,
    for_each_with_index,
    format_value,
    function_call,
    null_coalesce,
    quote,
    template_expression,
    ternary,
    variable_ref,
)


class TestBuilders:
    def test_template_strings(self):
        assert template_expression("a") == "${a}"
        assert variable_ref("user.name") == "${user.name}"
        assert function_call("concat", "a", "b") == "${concat(a, b)}"
        assert conditional_value("x", "'y'", "'z'") == "${if(x, 'y', 'z')}"
        assert format_value("%s items", "count") == '${format("%s items", count)}'
        assert for_each("item", "items", "item.name") == "${forEach(item, items, item.name)}"
        assert for_each_with_index("item", "i", "items", "i") == "${forEach(item, i, items, i)}"
        assert ternary("a", "b", "c") == "${a ? b : c}"
        assert null_coalesce("a", "'x'") == "${a ?? 'x'}"
        assert array_access("items", 2) == "${items[2]}"

    def test_quote_escapes(self):
        assert quote('say "hi"') == '"say \\"hi\\""'


class TestBuiltTemplatesEvaluate:
    @pytest.fixture
    def engine(self):
        return TemplateEngine()

    def test_ternary(self, engine):
        template = ternary("age >= 18", quote("adult"), quote("minor"))

        assert engine.evaluate_expression(template, {"age": 20}) == "adult"

    def test_format_value(self, engine):
        template = format_value("%s items", "count")

        assert engine.evaluate_expression(template, {"count": 3}) == "3 items"

    def test_quoted_text_survives(self, engine):
        template = template_expression(quote('say "hi"'))

        assert engine.evaluate_expression(template) == 'say "hi"'

    def test_for_each_with_index(self, engine):
        template = for_each_with_index("x", "i", "items", "concat(i, x)")

        assert engine.evaluate_expression(template, {"items": ["a", "b"]}) == "0a1b"

    def test_array_access(self, engine):
        assert engine.evaluate_expression(array_access("items", 1), {"items": ["a", "b"]}) == "b"
