"""Registry of context providers with filter-based collection."""

from __future__ import annotations

from threading import Lock
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..interfaces import ContextProvider
from ..logging import get_logger
from ..tools import ToolFilter


class ContextRegistry:
    """Thread-safe registry of :class:`ContextProvider` instances.

    Registering a provider whose ``provider_id`` is already known replaces
    the previous one; providers keep their first registration slot.
    """

    def __init__(self, providers: Optional[Iterable[ContextProvider]] = None) -> None:
        self._lock = Lock()
        self._snapshot: Mapping[str, ContextProvider] = MappingProxyType({})
        self.logger = get_logger("aicall.registry.context")
        for provider in providers or ():
            self.register(provider)

    def register(self, provider: ContextProvider) -> ContextProvider:
        """Add or replace ``provider``.

        Raises:
            ValueError: if the provider id is empty.
        """
        provider_id = (provider.provider_id or "").strip()
        if not provider_id:
            raise ValueError("context provider id must be non-empty")
        with self._lock:
            data = dict(self._snapshot)
            data[provider_id] = provider
            self._snapshot = MappingProxyType(data)
        self.logger.debug("Context provider registered", extra={"context_provider": provider_id})
        return provider

    def unregister(self, provider_id: str) -> None:
        with self._lock:
            if provider_id not in self._snapshot:
                return
            data = dict(self._snapshot)
            del data[provider_id]
            self._snapshot = MappingProxyType(data)

    def get(self, provider_id: str) -> Optional[ContextProvider]:
        return self._snapshot.get(provider_id)

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._snapshot)

    def current_context(self, context_filter: Optional[str] = None) -> Dict[str, str]:
        """Collect values from the providers passing ``context_filter``.

        The filter uses the tool filter grammar (``"*"``, ``"-*"``,
        ``"time,doc"``, ``"* -doc"``). Later providers win on key clashes.
        """
        flt = ToolFilter.parse(context_filter)
        collected: Dict[str, str] = {}
        for provider_id, provider in self._snapshot.items():
            if not flt.should_include(provider_id):
                continue
            for key, value in provider.get_context().items():
                name = key if "_" in key else f"{provider_id}_{key}"
                collected[name] = "" if value is None else str(value)
        return collected

    def __contains__(self, provider_id: object) -> bool:
        return isinstance(provider_id, str) and provider_id in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)


__all__ = ["ContextRegistry"]
