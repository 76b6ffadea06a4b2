"""Implementation parts for :mod:`aicall.base.diagnostics`."""

from .message_code import RETRYABLE_CODES, SELECTION_CODES, MessageCode
from .origin import MessageOrigin
from .runtime_message import RuntimeMessage, new_message, render_message
from .severity import MessageSeverity
from .sink import DiagnosticsSealedError, DiagnosticsSink

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
