"""SmartForm: template expressions for dynamic forms."""

from smartform.config import EngineConfig
from smartform.template import TemplateEngine, VariableRegistry

__version__ = "0.1.0"

__all__ = ["EngineConfig", "TemplateEngine", "VariableRegistry", "__version__"]
