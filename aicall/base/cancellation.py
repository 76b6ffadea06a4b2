"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` is the one cancellation signal shared by every stage of
an AI call. ``CancelledError`` is raised by operations that observe it.
Implementations live under ``cancellation_parts``.
"""

from .cancellation_parts.cancellation_token import CancellationToken
from .cancellation_parts.cancelled_error import CancelledError

__all__ = ["CancellationToken", "CancelledError"]
