"""Provider registry.

Explicit, injectable component (no module globals) holding the providers a
process can dispatch to. Registration resolves everything the hot path needs
once: the streaming capability and the provider's declared models, which
are loaded into the shared :class:`ModelCapabilityRegistry`.

Writes build a new immutable snapshot under a lock; readers use whatever
snapshot is current without locking, so registering a provider while calls
are in flight never exposes a partial state.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..interfaces import AIProvider, SupportsStreaming
from ..logging import get_logger
from ..repositories import ModelCapabilityRegistry


@dataclass(frozen=True)
class ProviderRegistration:
    """Registered provider plus capabilities resolved at registration time.

    Attributes:
        provider: The adapter instance.
        streaming_supported: The adapter can hand out streaming adapters.
        streaming_enabled: Streaming allowed by configuration.
    """

    provider: AIProvider
    streaming_supported: bool
    streaming_enabled: bool = True

    @property
    def name(self) -> str:
        return self.provider.name


class ProviderRegistry:
    """Thread-safe registry of provider adapters keyed by canonical id."""

    def __init__(self, models: Optional[ModelCapabilityRegistry] = None) -> None:
        self.models = models if models is not None else ModelCapabilityRegistry()
        self._lock = Lock()
        self._snapshot: Mapping[str, ProviderRegistration] = MappingProxyType({})
        self.logger = get_logger("aicall.registry.providers")

    def register(self, provider: AIProvider, *, streaming_enabled: bool = True) -> ProviderRegistration:
        """Register (or replace) ``provider`` and its declared models.

        Raises:
            TypeError: when ``provider`` does not implement :class:`AIProvider`.
            ValueError: when the provider name is empty.
        """
        if not isinstance(provider, AIProvider):
            raise TypeError(f"{type(provider).__name__} does not implement AIProvider")
        key = (provider.name or "").strip().lower()
        if not key:
            raise ValueError("provider name must be non-empty")
        supported = isinstance(provider, SupportsStreaming) and bool(provider.supports_streaming())
        registration = ProviderRegistration(provider, supported, streaming_enabled)
        entries = tuple(provider.models())
        with self._lock:
            self.models.unregister_provider(key)
            self.models.register_many(entries)
            data = dict(self._snapshot)
            data[key] = registration
            self._snapshot = MappingProxyType(data)
        self.logger.info(
            "Provider registered",
            extra={"provider": key, "models": len(entries), "streaming": supported and streaming_enabled},
        )
        return registration

    def unregister(self, name: str) -> None:
        """Remove a provider and its models.

        Raises:
            KeyError: if the provider is not registered.
        """
        key = (name or "").strip().lower()
        with self._lock:
            if key not in self._snapshot:
                raise KeyError(f"Provider '{name}' not registered")
            data = dict(self._snapshot)
            del data[key]
            self._snapshot = MappingProxyType(data)
            self.models.unregister_provider(key)
        self.logger.info("Provider unregistered", extra={"provider": key})

    def registration(self, name: str) -> Optional[ProviderRegistration]:
        return self._snapshot.get((name or "").strip().lower())

    def get(self, name: str) -> Optional[AIProvider]:
        reg = self.registration(name)
        return reg.provider if reg else None

    def names(self) -> Tuple[str, ...]:
        return tuple(self._snapshot)

    def snapshot(self) -> Mapping[str, ProviderRegistration]:
        return self._snapshot

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.registration(name) is not None

    def __len__(self) -> int:
        return len(self._snapshot)


__all__ = ["ProviderRegistry", "ProviderRegistration"]
