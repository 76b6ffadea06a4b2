"""Streaming package: delta types, options, coalescing and the base adapter."""

from .accumulate import StreamAccumulator, accumulate_deltas
from .coalescer import PendingText, TextStreamCoalescer
from .response_delta import ResponseDelta, ToolCallFragment
from .streaming_adapter import BaseStreamingAdapter
from .streaming_finalize import finalize_stream
from .streaming_metrics import StreamMetrics
from .streaming_options import StreamingOptions

__all__ = [
    "BaseStreamingAdapter",
    "PendingText",
    "ResponseDelta",
    "StreamAccumulator",
    "StreamMetrics",
    "StreamingOptions",
    "TextStreamCoalescer",
    "ToolCallFragment",
    "accumulate_deltas",
    "finalize_stream",
]
