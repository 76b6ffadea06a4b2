"""Clamp the per-turn timeout into the supported range."""

from __future__ import annotations

from ....config.defaults import DEFAULT_TIMEOUT_SECONDS, MAX_TIMEOUT_SECONDS, MIN_TIMEOUT_SECONDS
from ...diagnostics import MessageOrigin, MessageSeverity
from ..policy_base import RequestPolicy
from ..policy_context import PolicyContext


class RequestTimeoutPolicy(RequestPolicy):
    """Apply a default timeout and clamp explicit ones to ``[minimum, maximum]``."""

    def __init__(
        self,
        *,
        default_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        minimum: int = MIN_TIMEOUT_SECONDS,
        maximum: int = MAX_TIMEOUT_SECONDS,
    ) -> None:
        if not minimum <= default_seconds <= maximum:
            raise ValueError("default timeout must lie within [minimum, maximum]")
        self.default_seconds = default_seconds
        self.minimum = minimum
        self.maximum = maximum

    async def apply(self, context: PolicyContext) -> None:
        request = context.request
        current = request.timeout_seconds
        if current is None or current <= 0:
            value, note, surface = self.default_seconds, f"Timeout applied: {self.default_seconds}s (default)", False
        elif current < self.minimum:
            value, note, surface = self.minimum, f"Timeout increased from {current}s to {self.minimum}s (minimum)", True
        elif current > self.maximum:
            value, note, surface = self.maximum, f"Timeout reduced from {current}s to {self.maximum}s (maximum)", True
        else:
            return
        context.diagnostics.add(MessageSeverity.INFO, MessageOrigin.REQUEST, note, surfaceable=surface)
        context.request = request.replace(timeout_seconds=value)


__all__ = ["RequestTimeoutPolicy"]
