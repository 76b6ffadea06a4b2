"""One-protocol-per-file interface parts; import from ``aicall.base.interfaces``."""

from .ai_provider import AIProvider
from .context_provider import ContextProvider
from .provider_executor import ProviderExecutor
from .supports_streaming import SupportsStreaming

__all__ = ["AIProvider", "ContextProvider", "ProviderExecutor", "SupportsStreaming"]
