"""Structured diagnostics public surface.

Every stage of a call reports problems and notes as :class:`RuntimeMessage`
values collected in a per-call :class:`DiagnosticsSink`. Codes are stable
integers; text is for humans.
"""

from .diagnostics_parts import (
    RETRYABLE_CODES,
    SELECTION_CODES,
    DiagnosticsSealedError,
    DiagnosticsSink,
    MessageCode,
    MessageOrigin,
    MessageSeverity,
    RuntimeMessage,
    new_message,
    render_message,
)

__all__ = [
    "MessageCode",
    "MessageOrigin",
    "MessageSeverity",
    "RuntimeMessage",
    "DiagnosticsSink",
    "DiagnosticsSealedError",
    "new_message",
    "render_message",
    "SELECTION_CODES",
    "RETRYABLE_CODES",
]
