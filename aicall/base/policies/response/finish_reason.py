"""Canonical finish reasons."""

from __future__ import annotations

from typing import Dict, Optional

from ...diagnostics import MessageOrigin, MessageSeverity
from ..policy_base import ResponsePolicy
from ..policy_context import PolicyContext

_ALIASES = {
    "stop": ("stop", "stopped", "completed", "end", "eos", "stop_sequence"),
    "length": ("length", "max_tokens", "max_token", "max_tokens_exceeded", "content_length", "length_finish"),
    "timeout": ("timeout", "time_out", "deadline_exceeded"),
    "cancelled": ("cancelled", "canceled", "cancel", "user_cancelled", "aborted", "abort"),
    "tool_calls": ("tool_call", "tool_calls", "function_call", "function_calls"),
    "content_filter": ("content_filter", "safety", "filtered"),
    "error": ("error", "failed"),
}

FINISH_REASON_MAP: Dict[str, str] = {alias: canon for canon, aliases in _ALIASES.items() for alias in aliases}


def normalize_finish_reason(value: Optional[str]) -> Optional[str]:
    """Canonical form of ``value`` or ``None`` when it is unknown or empty."""
    if not value:
        return None
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    return FINISH_REASON_MAP.get(key)


class FinishReasonNormalizePolicy(ResponsePolicy):
    async def apply(self, context: PolicyContext) -> None:
        response = context.response
        if response is None:
            return
        sink = context.diagnostics
        original = (response.finish_reason or "").strip()
        if not original:
            if response.tool_calls:
                response.finish_reason = "tool_calls"
                return
            response.finish_reason = "stop"
            sink.add(MessageSeverity.WARNING, MessageOrigin.RETURN, "Finish reason missing; defaulted to 'stop'.")
            return
        canonical = normalize_finish_reason(original)
        if canonical is None:
            sink.add(
                MessageSeverity.WARNING,
                MessageOrigin.RETURN,
                f"Unrecognized finish reason '{original}'. Keeping original value.",
            )
            return
        if canonical != response.finish_reason:
            sink.add(
                MessageSeverity.INFO,
                MessageOrigin.RETURN,
                f"Normalized finish reason '{original}' -> '{canonical}'.",
                surfaceable=False,
            )
            response.finish_reason = canonical


__all__ = ["FinishReasonNormalizePolicy", "FINISH_REASON_MAP", "normalize_finish_reason"]
