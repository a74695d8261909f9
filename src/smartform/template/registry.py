"""Variable and function registry shared by template evaluations.

The registry holds global variables (resolved when a path is not present
in the per-call context) and the functions callable from templates.

Writes replace the internal dictionaries wholesale under a lock, so a
reader always sees a complete snapshot and never waits on a writer.
"""

import logging
import threading
from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable

from smartform.template.functions import FunctionCategory, FunctionDefinition
from smartform.template.paths import NOT_FOUND, resolve_path, root_name
from smartform.template.values import Value, to_value

logger = logging.getLogger(__name__)


class VariableRegistry:
    """Thread-safe registry of variables and functions.

    Example:
        registry = VariableRegistry()
        registry.register_standard_functions()
        registry.register_variable("company", {"name": "Acme"})

        registry.get_variable("company.name")  # "Acme"
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._variables: dict[str, Value] = {}
        self._functions: dict[str, FunctionDefinition] = {}

    # -------------------------------------------------------------------------
    # Variables
    # -------------------------------------------------------------------------

    def register_variable(self, name: str, value: Any) -> None:
        """Register or replace a global variable.

        Args:
            name: Root name the variable is referenced by
            value: Any value convertible to the template value model

        Raises:
            TypeError: If the value has no template representation
        """
        normalized = to_value(value)
        with self._lock:
            variables = dict(self._variables)
            variables[name] = normalized
            self._variables = variables
        logger.debug("Registered variable %s", name)

    def unregister_variable(self, name: str) -> bool:
        """Remove a global variable. Returns False if it was not registered."""
        with self._lock:
            if name not in self._variables:
                return False
            variables = dict(self._variables)
            del variables[name]
            self._variables = variables
        logger.debug("Unregistered variable %s", name)
        return True

    def get_variable(self, path: str) -> Any:
        """Resolve a variable path against the registered variables.

        Returns:
            The resolved value, or NOT_FOUND
        """
        variables = self._variables
        root = root_name(path)
        if root not in variables:
            return NOT_FOUND
        return resolve_path({root: variables[root]}, path)

    def variables(self) -> Mapping[str, Value]:
        """Read-only snapshot of all registered variables."""
        return MappingProxyType(self._variables)

    # -------------------------------------------------------------------------
    # Functions
    # -------------------------------------------------------------------------

    def register_function(
        self,
        name: str,
        implementation: Callable[..., Any],
        definition: FunctionDefinition | None = None,
    ) -> None:
        """Register or replace a function.

        Args:
            name: Name the function is called by in templates
            implementation: Callable invoked with the evaluated arguments
            definition: Optional metadata; minimal custom metadata is used if omitted
        """
        if definition is None:
            definition = FunctionDefinition.custom(name, implementation)
        else:
            definition = replace(definition, name=name, implementation=implementation)
        self.register_definition(definition)

    def register_definition(self, definition: FunctionDefinition) -> None:
        """Register a complete function definition."""
        if definition.implementation is None:
            raise ValueError(f"Function '{definition.name}' has no implementation")
        with self._lock:
            functions = dict(self._functions)
            functions[definition.name] = definition
            self._functions = functions
        logger.debug("Registered function %s", definition.name)

    def get_function(self, name: str) -> FunctionDefinition | None:
        """Get a function definition by name, or None if not registered."""
        return self._functions.get(name)

    def is_registered(self, name: str) -> bool:
        """Check if a function is registered."""
        return name in self._functions

    def list_functions(self, category: FunctionCategory | None = None) -> list[FunctionDefinition]:
        """List registered functions sorted by name, optionally by category."""
        functions = sorted(self._functions.values(), key=lambda f: f.name)
        if category is not None:
            functions = [f for f in functions if f.category == category]
        return functions

    def register_standard_functions(self) -> None:
        """Register the standard function library."""
        from smartform.template.builtins import register_standard_functions

        register_standard_functions(self)

    def export_documentation(self) -> dict[str, Any]:
        """Export all function definitions for documentation.

        Returns:
            Dict with all function definitions organized by category
        """
        by_category: dict[str, list[dict[str, Any]]] = {}
        for func_def in self.list_functions():
            category = func_def.category.value
            if category not in by_category:
                by_category[category] = []
            by_category[category].append(func_def.to_dict())

        return {
            "functions": {f.name: f.to_dict() for f in self.list_functions()},
            "byCategory": by_category,
        }
