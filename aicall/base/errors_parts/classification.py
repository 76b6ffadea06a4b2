"""
Error classification helpers mapping exceptions to normalized ErrorCode values
and ErrorCode values to diagnostic codes.

Classification uses HTTP status extraction first and message heuristics as a
fallback so SDK exceptions from any provider land in the same taxonomy.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Tuple

from ..diagnostics import MessageCode, MessageOrigin
from .error_code import ErrorCode
from .provider_error import ProviderError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from a provider exception.

    Checked in order: ``exc.status_code``, ``exc.status``,
    ``exc.response.status_code``.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

_PATTERN_GROUPS: Tuple[Tuple[ErrorCode, Tuple[str, ...]], ...] = (
    (ErrorCode.TIMEOUT, ("timeout",)),
    (ErrorCode.TIMEOUT, ("timed out",)),
    (ErrorCode.FORBIDDEN, ("forbidden",)),
    (ErrorCode.FORBIDDEN, ("permission denied",)),
    (ErrorCode.AUTH, ("unauthorized",)),
    (ErrorCode.AUTH, ("api key",)),
    (ErrorCode.AUTH, ("auth",)),
    (ErrorCode.UNSUPPORTED, ("unsupported",)),
    (ErrorCode.UNSUPPORTED, ("not supported",)),
    (ErrorCode.NOT_FOUND, ("not found",)),
    (ErrorCode.NOT_FOUND, ("does not exist",)),
    (ErrorCode.CONFLICT, ("conflict",)),
    (ErrorCode.CONFLICT, ("already exists",)),
    (ErrorCode.UNAVAILABLE, ("unavailable",)),
    (ErrorCode.UNAVAILABLE, ("temporarily down",)),
    (ErrorCode.VALIDATION, ("validation",)),
    (ErrorCode.VALIDATION, ("invalid",)),
    (ErrorCode.VALIDATION, ("malformed",)),
    (ErrorCode.SERVER_ERROR, ("server error",)),
    (ErrorCode.SERVER_ERROR, ("internal error",)),
)


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:
    """Substring heuristic mapping for non-HTTP exceptions."""
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in _PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Timeout exceptions (sync/async).
        3. HTTP status mapping.
        4. Substring heuristics.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


_MESSAGE_CODE_MAP: Dict[ErrorCode, MessageCode] = {
    ErrorCode.TIMEOUT: MessageCode.NETWORK_TIMEOUT,
    ErrorCode.AUTH: MessageCode.AUTHENTICATION_MISSING,
    ErrorCode.FORBIDDEN: MessageCode.AUTHORIZATION_FAILED,
    ErrorCode.RATE_LIMIT: MessageCode.RATE_LIMITED,
    ErrorCode.CANCELLED: MessageCode.CANCELLED,
    ErrorCode.VALIDATION: MessageCode.BODY_INVALID,
}

_NETWORK_CODES = frozenset(
    {ErrorCode.TIMEOUT, ErrorCode.TRANSIENT, ErrorCode.UNAVAILABLE, ErrorCode.RATE_LIMIT}
)


def to_message_code(code: ErrorCode) -> MessageCode:
    """Map a provider error category to its diagnostic code."""
    return _MESSAGE_CODE_MAP.get(code, MessageCode.UNKNOWN)


def to_message_origin(code: ErrorCode) -> MessageOrigin:
    """Network-level failures are reported as NETWORK, the rest as PROVIDER."""
    return MessageOrigin.NETWORK if code in _NETWORK_CODES else MessageOrigin.PROVIDER


__all__ = [
    "classify_exception",
    "to_message_code",
    "to_message_origin",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
