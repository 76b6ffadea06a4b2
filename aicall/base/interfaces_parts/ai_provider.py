"""AIProvider Protocol (single-class module).

Defines the minimal call contract for provider adapters.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..cancellation import CancellationToken
from ..models import CallRequest, CallResponse
from ..repositories import ModelEntry


@runtime_checkable
class AIProvider(Protocol):
    """Interface every provider adapter implements.

    Implementations map ``CallRequest`` to their SDK, return a
    ``CallResponse`` (optionally with the native payload in ``raw`` for the
    compatibility decoder) and raise ``ProviderError`` for failures. They must
    observe the cancellation token where the SDK allows it.
    """

    @property
    def name(self) -> str:
        """Canonical provider identifier, e.g. ``"openai"``."""
        ...

    def models(self) -> Sequence[ModelEntry]:
        """Models the provider declares, in preference order."""
        ...

    async def call(self, request: CallRequest, cancellation: CancellationToken) -> CallResponse:
        """Execute one non-streaming provider turn."""
        ...


__all__ = ["AIProvider"]
