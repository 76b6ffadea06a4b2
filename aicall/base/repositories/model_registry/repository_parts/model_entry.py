"""Registered model descriptor."""

from __future__ import annotations

from dataclasses import dataclass

from ....capabilities import Capability, has_capability


@dataclass(frozen=True)
class ModelEntry:
    """One model a provider declares.

    Attributes:
        provider: Canonical provider id.
        name: Model identifier sent to the provider.
        capabilities: Everything the model can do.
        default: Capabilities for which this model is the provider's default
            choice (``Capability.NONE`` when it is never a default).
        order: Declaration order within the provider; used for tie-breaking.
    """

    provider: str
    name: str
    capabilities: Capability = Capability.BASIC_CHAT
    default: Capability = Capability.NONE
    order: int = 0

    def supports(self, required: Capability | None) -> bool:
        return has_capability(self.capabilities, required)

    def is_default_for(self, required: Capability) -> bool:
        return bool(self.default) and has_capability(self.default, required)


__all__ = ["ModelEntry"]
