"""SupportsStreaming Protocol (single-class module).

Capability marker for providers that can stream incremental deltas.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..streaming import BaseStreamingAdapter


@runtime_checkable
class SupportsStreaming(Protocol):
    """Providers that can hand out a streaming adapter.

    ``streaming_adapter`` must return a fresh adapter on every call; adapters
    are single use.
    """

    def supports_streaming(self) -> bool:  # pragma: no cover - trivial
        return True

    def streaming_adapter(self) -> BaseStreamingAdapter:  # pragma: no cover - interface
        ...


__all__ = ["SupportsStreaming"]
