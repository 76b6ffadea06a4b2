"""Streaming metrics data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Collected metrics for one streaming turn.

    Attributes:
        emitted: Deltas yielded to the consumer (terminal delta included).
        chunks: Native chunks received from the provider.
        time_to_first_delta_ms: Latency until the first delta was yielded.
        total_duration_ms: Stream duration.
        peak_buffered: High-water mark of produced-but-unconsumed deltas.
        input_tokens: Prompt tokens when reported by the provider.
        output_tokens: Completion tokens when reported by the provider.
    """

    emitted: int = 0
    chunks: int = 0
    time_to_first_delta_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    peak_buffered: int = 0
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None

    def observe_buffer(self, size: int) -> None:
        if size > self.peak_buffered:
            self.peak_buffered = size

    def tokens(self) -> Optional[Dict[str, Any]]:
        if self.input_tokens is None and self.output_tokens is None:
            return None
        total = None
        if self.input_tokens is not None and self.output_tokens is not None:
            total = self.input_tokens + self.output_tokens
        return {"prompt": self.input_tokens, "completion": self.output_tokens, "total": total}


__all__ = ["StreamMetrics"]
