"""Provider, tool and context registries."""

from .context_registry import ContextRegistry
from .provider_registry import ProviderRegistration, ProviderRegistry
from .tool_registry import ToolRegistry

__all__ = ["ContextRegistry", "ProviderRegistration", "ProviderRegistry", "ToolRegistry"]
