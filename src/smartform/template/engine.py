"""Template engine facade.

TemplateEngine ties together the registry, the parse cache, the evaluator
and the suggestion generator. Form code only needs this class:

    engine = TemplateEngine()
    engine.register_variable("company", {"name": "Acme"})
    engine.evaluate_expression("Welcome to ${company.name}")  # "Welcome to Acme"
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable

from smartform.config import EngineConfig
from smartform.template.cache import ExpressionCache
from smartform.template.evaluator import EvaluationContext, Evaluator
from smartform.template.functions import FunctionDefinition
from smartform.template.parser import TemplateExpression
from smartform.template.registry import VariableRegistry
from smartform.template.suggestions import (
    VariableSuggestion,
    filter_suggestions,
    generate_suggestions,
)
from smartform.template.values import Value, is_truthy, stringify

logger = logging.getLogger(__name__)


def is_template_expression(text: str) -> bool:
    """Return True if text contains a ``${...}`` placeholder."""
    start = text.find("${")
    return start != -1 and text.find("}", start) != -1


class TemplateEngine:
    """Parses and evaluates SmartForm templates.

    Args:
        registry: Registry to use; a new one is created if omitted
        config: Engine configuration; defaults are used if omitted
    """

    def __init__(
        self,
        registry: VariableRegistry | None = None,
        config: EngineConfig | None = None,
    ):
        self.config = config or EngineConfig()
        if registry is None:
            registry = VariableRegistry()
            if self.config.register_standard_functions:
                registry.register_standard_functions()
        self.registry = registry
        self.cache = ExpressionCache(max_entries=self.config.cache_max_entries)
        logger.debug(
            "Created template engine (cache_max_entries=%d, sort_map_iteration=%s)",
            self.config.cache_max_entries,
            self.config.sort_map_iteration,
        )

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_variable(self, name: str, value: Any) -> None:
        self.registry.register_variable(name, value)

    def unregister_variable(self, name: str) -> bool:
        return self.registry.unregister_variable(name)

    def register_function(
        self,
        name: str,
        implementation: Callable[..., Any],
        definition: FunctionDefinition | None = None,
    ) -> None:
        self.registry.register_function(name, implementation, definition)

    # -------------------------------------------------------------------------
    # Parsing and evaluation
    # -------------------------------------------------------------------------

    def parse_template_expression(self, raw: str) -> TemplateExpression:
        """Parse a template, reusing a cached parse when available.

        Raises:
            ParseError: If the template is malformed
        """
        return self.cache.get_or_parse(raw)

    def evaluate_expression(
        self,
        raw: str,
        context: Mapping[str, Any] | None = None,
        coalesce: bool = False,
    ) -> Value:
        """Evaluate a template against a context.

        Args:
            raw: Template text, e.g. "${user.age >= 18 ? 'adult' : 'minor'}"
            context: Per-call values (typically current form values)
            coalesce: Treat unresolved variables as null for the whole evaluation

        Returns:
            The typed value for a single-part template, otherwise the
            concatenation of all parts as a string

        Raises:
            ParseError: If the template is malformed
            EvaluationError: If evaluation fails
        """
        expression = self.parse_template_expression(raw)
        evaluation_context = EvaluationContext(
            registry=self.registry,
            values=dict(context or {}),
            coalescing=coalesce,
            sort_map_iteration=self.config.sort_map_iteration,
        )
        return Evaluator(evaluation_context).evaluate_template(expression)

    def evaluate_expression_as_string(
        self,
        raw: str,
        context: Mapping[str, Any] | None = None,
        coalesce: bool = False,
    ) -> str:
        """Evaluate a template and stringify the result."""
        return stringify(self.evaluate_expression(raw, context, coalesce=coalesce))

    def evaluate_condition(
        self,
        expression: str,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Evaluate a visibility/enablement condition.

        Bare expressions such as ``user.age >= 18`` are wrapped in ``${}``.
        Empty arrays and objects count as false here.
        """
        if not is_template_expression(expression):
            expression = f"${{{expression}}}"

        result = self.evaluate_expression(expression, context)
        if isinstance(result, (list, dict)):
            return len(result) > 0
        return is_truthy(result)

    # -------------------------------------------------------------------------
    # Suggestions
    # -------------------------------------------------------------------------

    def get_expression_suggestions(self, partial: str = "") -> list[VariableSuggestion]:
        """Return suggestions that fit the partial expression being typed."""
        suggestions = generate_suggestions(self.registry)
        return filter_suggestions(suggestions, partial)
