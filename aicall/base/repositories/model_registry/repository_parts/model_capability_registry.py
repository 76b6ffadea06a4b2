"""In-memory model capability registry.

Holds the models each provider declares together with their capabilities and
default flags, and answers "which model should serve this capability" for a
provider. Entries may be shell-style patterns such as ``gpt-4*``; they lend
their capabilities to matching names and resolve to a concrete registered
model when chosen as a default. Writes replace an immutable snapshot under
a lock so concurrent readers never observe a half-applied registration.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from threading import Lock
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ....capabilities import Capability
from .model_entry import ModelEntry
from .model_registry_error import ModelRegistryError

_Snapshot = Mapping[str, Tuple[ModelEntry, ...]]


def _key(value: str) -> str:
    return (value or "").strip().lower()


def is_model_pattern(name: str) -> bool:
    return any(ch in name for ch in "*?[")


class ModelCapabilityRegistry:
    """Per-provider model catalogue with deterministic default resolution."""

    def __init__(self, entries: Optional[Iterable[ModelEntry]] = None) -> None:
        self._lock = Lock()
        self._snapshot: _Snapshot = MappingProxyType({})
        if entries:
            self.register_many(entries)

    def register(self, entry: ModelEntry) -> ModelEntry:
        """Add or replace a single model (keeps its declaration slot when replaced)."""
        return self.register_many([entry])[0]

    def register_many(self, entries: Iterable[ModelEntry]) -> Tuple[ModelEntry, ...]:
        """Register models in declaration order.

        Raises:
            ModelRegistryError: when an entry has an empty provider or name.
        """
        items = list(entries)
        for entry in items:
            if not _key(entry.provider) or not entry.name.strip():
                raise ModelRegistryError(f"invalid model entry: {entry!r}")
        with self._lock:
            data: Dict[str, list] = {k: list(v) for k, v in self._snapshot.items()}
            stored = []
            for entry in items:
                bucket = data.setdefault(_key(entry.provider), [])
                existing = next((i for i, m in enumerate(bucket) if m.name == entry.name), None)
                if existing is None:
                    entry = ModelEntry(entry.provider, entry.name, entry.capabilities, entry.default, len(bucket))
                    bucket.append(entry)
                else:
                    entry = ModelEntry(entry.provider, entry.name, entry.capabilities, entry.default, existing)
                    bucket[existing] = entry
                stored.append(entry)
            self._snapshot = MappingProxyType({k: tuple(v) for k, v in data.items()})
        return tuple(stored)

    def unregister_provider(self, provider: str) -> None:
        with self._lock:
            data = dict(self._snapshot)
            data.pop(_key(provider), None)
            self._snapshot = MappingProxyType(data)

    def models_for(self, provider: str) -> Tuple[ModelEntry, ...]:
        return self._snapshot.get(_key(provider), ())

    def get(self, provider: str, model: str) -> Optional[ModelEntry]:
        """Exact name first, then the first pattern entry (``gpt-4*``) matching ``model``."""
        models = self.models_for(provider)
        for entry in models:
            if entry.name == model:
                return entry
        for entry in models:
            if is_model_pattern(entry.name) and fnmatchcase(model, entry.name):
                return entry
        return None

    def capabilities_of(self, provider: str, model: str) -> Capability:
        entry = self.get(provider, model)
        return entry.capabilities if entry else Capability.NONE

    def resolve_pattern(self, provider: str, pattern: str) -> Optional[str]:
        """Alphabetically first concrete model matching ``pattern``; names without wildcards pass through."""
        if not is_model_pattern(pattern):
            return pattern
        matches = sorted(
            e.name for e in self.models_for(provider) if not is_model_pattern(e.name) and fnmatchcase(e.name, pattern)
        )
        return matches[0] if matches else None

    def default_for(self, provider: str, capability: Capability | None = None) -> Optional[str]:
        """Resolve the model that should serve ``capability`` for ``provider``.

        Resolution order:
            1. first concrete model whose default flags cover the requirement;
            2. first default-flagged concrete model that has the capability;
            3. the same two passes over pattern entries, each resolved to the
               first concrete model it matches (unresolvable patterns are skipped);
            4. first capable concrete model in declared order.

        Returns ``None`` when no declared model has the capability.
        """
        required = Capability.BASIC_CHAT if capability is None else Capability(capability)
        models = self.models_for(provider)
        concrete = [e for e in models if not is_model_pattern(e.name)]
        patterns = [e for e in models if is_model_pattern(e.name)]
        for group in (concrete, patterns):
            flagged = [e for e in group if e.is_default_for(required) and e.supports(required)]
            flagged += [e for e in group if e.default and e.supports(required) and e not in flagged]
            for entry in flagged:
                name = self.resolve_pattern(provider, entry.name)
                if name is not None:
                    return name
        for entry in concrete:
            if entry.supports(required):
                return entry.name
        return None

    def snapshot(self) -> _Snapshot:
        return self._snapshot

    def __contains__(self, provider: object) -> bool:
        return isinstance(provider, str) and _key(provider) in self._snapshot


__all__ = ["ModelCapabilityRegistry", "is_model_pattern"]
