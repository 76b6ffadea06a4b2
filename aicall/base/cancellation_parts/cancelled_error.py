"""Cancellation error type.

Defines the public ``CancelledError`` raised when an operation observes a
cancellation request. It is distinct from ``asyncio.CancelledError``: the
orchestrator maps it to a cancelled response instead of a failure.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Separating cooperative cancellation from other runtime failures lets
    callers skip retries and report a ``cancelled`` finish reason.
    """


__all__ = ["CancelledError"]
