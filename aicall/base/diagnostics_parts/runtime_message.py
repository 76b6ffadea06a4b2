"""Immutable diagnostic value and its constructors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .message_code import MessageCode
from .origin import MessageOrigin
from .severity import MessageSeverity


@dataclass(frozen=True)
class RuntimeMessage:
    """One structured diagnostic attached to a call.

    Attributes:
        severity: Info, warning or error.
        origin: Stage that produced the message.
        code: Stable machine code (``MessageCode.UNKNOWN`` when not classified).
        text: Human-readable description; never ``None``.
        surfaceable: Whether a UI should show the message to end users.
    """

    severity: MessageSeverity
    origin: MessageOrigin
    code: MessageCode
    text: str
    surfaceable: bool = True

    @property
    def is_error(self) -> bool:
        return self.severity is MessageSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted shape (code as its integer value)."""
        return {
            "severity": self.severity.name.lower(),
            "origin": self.origin.value,
            "code": int(self.code),
            "text": self.text,
            "surfaceable": self.surfaceable,
        }


def new_message(
    severity: MessageSeverity,
    origin: MessageOrigin,
    text: Optional[str] = None,
    *,
    code: MessageCode = MessageCode.UNKNOWN,
    surfaceable: bool = True,
) -> RuntimeMessage:
    """Build a :class:`RuntimeMessage`; ``None`` text becomes ``""``."""
    return RuntimeMessage(
        severity=MessageSeverity(severity),
        origin=MessageOrigin(origin),
        code=MessageCode(code),
        text="" if text is None else str(text),
        surfaceable=surfaceable,
    )


def render_message(message: RuntimeMessage) -> str:
    """Legacy single-line rendering, e.g. ``[Warning][Return] text``."""
    rendered = f"[{message.severity.label}][{message.origin.label}] {message.text}"
    if message.code is not MessageCode.UNKNOWN:
        rendered += f" (code={message.code.name})"
    return rendered


__all__ = ["RuntimeMessage", "new_message", "render_message"]
