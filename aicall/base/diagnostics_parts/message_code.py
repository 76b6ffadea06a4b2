"""Stable machine codes for runtime messages.

The integer values are persisted by callers and surfaced in logs, so they are
a public contract: new codes are appended, existing values never change.
"""
from __future__ import annotations

from enum import IntEnum


class MessageCode(IntEnum):
    """Enumerated diagnostic codes."""

    UNKNOWN = 0
    PROVIDER_MISSING = 1
    UNKNOWN_PROVIDER = 2
    UNKNOWN_MODEL = 3
    NO_CAPABLE_MODEL = 4
    CAPABILITY_MISMATCH = 5
    STREAMING_DISABLED_PROVIDER = 6
    STREAMING_UNSUPPORTED_MODEL = 7
    TOOL_VALIDATION_ERROR = 8
    BODY_INVALID = 9
    RETURN_INVALID = 10
    NETWORK_TIMEOUT = 11
    AUTHENTICATION_MISSING = 12
    AUTHORIZATION_FAILED = 13
    RATE_LIMITED = 14
    CANCELLED = 15
    TOOL_BUDGET_EXCEEDED = 16
    POLICY_FAILED = 17


# Codes that stop a call before any provider dispatch when raised at ERROR.
SELECTION_CODES = frozenset(
    {
        MessageCode.PROVIDER_MISSING,
        MessageCode.UNKNOWN_PROVIDER,
        MessageCode.UNKNOWN_MODEL,
        MessageCode.NO_CAPABLE_MODEL,
        MessageCode.CAPABILITY_MISMATCH,
        MessageCode.BODY_INVALID,
    }
)

# Transient failures a caller may retry.
RETRYABLE_CODES = frozenset({MessageCode.NETWORK_TIMEOUT, MessageCode.RATE_LIMITED})


__all__ = ["MessageCode", "SELECTION_CODES", "RETRYABLE_CODES"]
