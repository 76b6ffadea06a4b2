"""Streaming behaviour options."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ...config.defaults import (
    DEFAULT_COALESCE_DELAY_MS,
    DEFAULT_COALESCE_TOKENS,
    DEFAULT_MAX_BUFFERED_DELTAS,
    DEFAULT_PREFERRED_CHUNK_SIZE,
)


class StreamingOptions(BaseModel):
    """Coalescing and buffering knobs for one stream.

    Attributes:
        coalesce_tokens: Merge consecutive text deltas before emission.
        coalesce_delay_ms: Maximum time buffered text waits before it is
            flushed, even when no new fragment arrives.
        preferred_chunk_size: Flush as soon as buffered text reaches this
            many characters.
        max_buffered_deltas: Bound on deltas produced but not yet consumed;
            the producer suspends when it is reached.
        idle_timeout_seconds: End the stream with a timeout error when no
            chunk arrives for this long (``None`` disables the check).
    """

    model_config = ConfigDict(frozen=True)

    coalesce_tokens: bool = DEFAULT_COALESCE_TOKENS
    coalesce_delay_ms: int = Field(default=DEFAULT_COALESCE_DELAY_MS, ge=0)
    preferred_chunk_size: int = Field(default=DEFAULT_PREFERRED_CHUNK_SIZE, ge=1)
    max_buffered_deltas: int = Field(default=DEFAULT_MAX_BUFFERED_DELTAS, ge=1)
    idle_timeout_seconds: Optional[float] = Field(default=None, gt=0)


__all__ = ["StreamingOptions"]
