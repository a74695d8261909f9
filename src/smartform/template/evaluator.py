"""Evaluator for SmartForm template expressions.

Walks the parsed parts and computes a value against an evaluation context
holding the per-call values, the registry and the coalescing flag.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from smartform.template.builtins import SHORT_CIRCUIT_FUNCTIONS, condition_value
from smartform.template.errors import (
    EvaluationError,
    FunctionCallError,
    FunctionNotFoundError,
    VariableNotFoundError,
)
from smartform.template.parser import (
    ForEachPart,
    FunctionPart,
    LiteralPart,
    NullCoalescePart,
    Part,
    TemplateExpression,
    TextPart,
    VariablePart,
)
from smartform.template.paths import NOT_FOUND, resolve_path
from smartform.template.registry import VariableRegistry
from smartform.template.values import Value, is_blank, is_truthy, stringify, to_value


@dataclass
class EvaluationContext:
    """Context for expression evaluation.

    Attributes:
        registry: Registry consulted for functions and for variables missing from values
        values: Per-call variables; these shadow registry variables
        coalescing: When True, unresolved variables evaluate to None instead of raising
        sort_map_iteration: Iterate objects in forEach by sorted key instead of insertion order
    """

    registry: VariableRegistry
    values: dict[str, Any] = field(default_factory=dict)
    coalescing: bool = False
    sort_map_iteration: bool = False


class Evaluator:
    """Evaluates template parts against a context.

    Usage:
        ctx = EvaluationContext(registry=registry, values={"user": {"name": "Ada"}})
        evaluator = Evaluator(ctx)
        result = evaluator.evaluate(VariablePart("user.name"))
    """

    def __init__(self, context: EvaluationContext):
        self.context = context

    def evaluate(self, node: Part) -> Value:
        """Evaluate a part and return the result."""
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    def evaluate_template(self, expression: TemplateExpression) -> Value:
        """Evaluate a whole template.

        A single part yields its typed value; several parts are stringified
        and concatenated.
        """
        if len(expression.parts) == 1:
            return self.evaluate(expression.parts[0])
        return "".join(stringify(self.evaluate(part)) for part in expression.parts)

    def _scoped(self, **changes: Any) -> "Evaluator":
        return Evaluator(replace(self.context, **changes))

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _eval_textpart(self, node: TextPart) -> str:
        return node.text

    def _eval_literalpart(self, node: LiteralPart) -> Value:
        return node.value

    def _eval_variablepart(self, node: VariablePart) -> Value:
        """Resolve a variable path: context first, then the registry."""
        value = resolve_path(self.context.values, node.path)
        if value is not NOT_FOUND:
            try:
                return to_value(value)
            except TypeError as e:
                raise EvaluationError(f"variable {node.path}: {e}") from e

        # Copy so that callers cannot mutate registered values
        value = self.context.registry.get_variable(node.path)
        if value is not NOT_FOUND:
            return to_value(value)

        if self.context.coalescing:
            return None
        raise VariableNotFoundError(node.path)

    def _eval_functionpart(self, node: FunctionPart) -> Value:
        """Evaluate a function call."""
        func_def = self.context.registry.get_function(node.name)

        if func_def is not None:
            if func_def.implementation is SHORT_CIRCUIT_FUNCTIONS.get(node.name):
                return self._eval_short_circuit(node)

        args = [self.evaluate(arg) for arg in node.args]

        if func_def is None:
            raise FunctionNotFoundError(node.name)

        try:
            result = func_def.implementation(*args)
        except EvaluationError:
            raise
        except Exception as e:
            raise FunctionCallError(node.name, str(e)) from e

        try:
            return to_value(result)
        except TypeError as e:
            raise FunctionCallError(node.name, str(e)) from e

    def _eval_short_circuit(self, node: FunctionPart) -> Value:
        """Evaluate if/and/or without evaluating unneeded arguments."""
        if node.name == "if":
            if len(node.args) != 3:
                raise FunctionCallError(
                    "if", "requires 3 arguments: condition, trueValue, falseValue"
                )
            condition = self.evaluate(node.args[0])
            try:
                chosen = node.args[1] if condition_value(condition) else node.args[2]
            except ValueError as e:
                raise FunctionCallError("if", str(e)) from e
            return self.evaluate(chosen)

        # "and" stops at the first falsy argument, "or" at the first truthy one
        stop_on = node.name == "or"
        for arg in node.args:
            if is_truthy(self.evaluate(arg)) == stop_on:
                return stop_on
        return not stop_on

    def _eval_nullcoalescepart(self, node: NullCoalescePart) -> Value:
        """Evaluate left ?? right."""
        try:
            left = self._scoped(coalescing=True).evaluate(node.left)
        except EvaluationError:
            left = None

        if not is_blank(left):
            return left
        return self.evaluate(node.right)

    def _eval_foreachpart(self, node: ForEachPart) -> str:
        """Evaluate forEach by rendering the body once per element."""
        collection = self.evaluate(node.collection)

        if isinstance(collection, list):
            items = collection
        elif isinstance(collection, dict):
            keys = sorted(collection) if self.context.sort_map_iteration else list(collection)
            items = [{"key": key, "value": collection[key]} for key in keys]
        else:
            return ""

        chunks = []
        for index, item in enumerate(items):
            values = dict(self.context.values)
            values[node.item_var] = item
            if node.index_var is not None:
                values[node.index_var] = float(index)

            text = stringify(self._scoped(values=values).evaluate(node.body))
            if text:
                chunks.append(text)

        return "".join(chunks)


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def evaluate(
    expression: TemplateExpression,
    registry: VariableRegistry,
    values: dict[str, Any] | None = None,
    coalescing: bool = False,
) -> Value:
    """Evaluate a parsed template.

    Args:
        expression: Parsed template
        registry: Registry for functions and global variables
        values: Per-call variables
        coalescing: Treat unresolved variables as None

    Returns:
        The typed value of a single-part template, or the concatenated string
    """
    context = EvaluationContext(
        registry=registry,
        values=dict(values or {}),
        coalescing=coalescing,
    )
    return Evaluator(context).evaluate_template(expression)
