"""Finalize stream helper.

Creates the single terminal ``ResponseDelta`` of a stream and emits the
consolidated ``stream.adapter.end`` / ``stream.adapter.error`` log event.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..logging import LogContext, normalized_log_event
from ..models import TokenUsage
from .response_delta import ResponseDelta
from .streaming_metrics import StreamMetrics


def finalize_stream(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    provider: str,
    model: str,
    metrics: StreamMetrics,
    finish_reason: Optional[str] = None,
    usage: Optional[TokenUsage] = None,
    error: Optional[str] = None,
) -> ResponseDelta:
    """Build the terminal delta and log stream metrics.

    ``error`` uses the ``"<error_code>:<message>"`` convention; the prefix is
    logged as ``error_code``.
    """
    error_code: Optional[str] = None
    if error and ":" in error:
        error_code = error.split(":", 1)[0].strip() or None

    normalized_log_event(
        logger,
        "stream.adapter.end" if error is None else "stream.adapter.error",
        ctx,
        phase="finalize",
        attempt=None,
        emitted=metrics.emitted > 0,
        tokens=metrics.tokens(),
        error_code=error_code,
        level=logging.INFO if error is None else logging.WARNING,
        emitted_count=metrics.emitted,
        chunks=metrics.chunks,
        peak_buffered=metrics.peak_buffered,
        time_to_first_delta_ms=metrics.time_to_first_delta_ms,
        total_duration_ms=metrics.total_duration_ms,
        error=error,
    )
    if error is not None and finish_reason is None:
        finish_reason = "cancelled" if error_code == "cancelled" else "error"
    return ResponseDelta(
        provider=provider,
        model=model,
        finish=True,
        finish_reason=finish_reason,
        usage=usage,
        error=error,
    )


__all__ = ["finalize_stream"]
