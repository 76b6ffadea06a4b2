"""Provider, context and executor contracts (public surface)."""

from .interfaces_parts.ai_provider import AIProvider
from .interfaces_parts.context_provider import ContextProvider
from .interfaces_parts.provider_executor import ProviderExecutor
from .interfaces_parts.supports_streaming import SupportsStreaming

__all__ = ["AIProvider", "ContextProvider", "ProviderExecutor", "SupportsStreaming"]
