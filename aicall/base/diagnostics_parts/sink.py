"""Append-only per-call diagnostics collection."""
from __future__ import annotations

from threading import Lock
from typing import Iterable, Iterator, List, Optional, Tuple

from .message_code import MessageCode
from .origin import MessageOrigin
from .runtime_message import RuntimeMessage, new_message
from .severity import MessageSeverity


class DiagnosticsSealedError(RuntimeError):
    """Raised when appending to a sink whose call has finished."""


class DiagnosticsSink:
    """Ordered, append-only list of :class:`RuntimeMessage` for one call.

    Entries are never removed or replaced. Once :meth:`seal` is called the
    sink rejects further appends, which keeps a finished response stable.
    """

    def __init__(self, messages: Optional[Iterable[RuntimeMessage]] = None) -> None:
        self._items: List[RuntimeMessage] = list(messages or ())
        self._sealed = False
        # tool tasks may append from worker threads
        self._lock = Lock()

    def append(self, message: RuntimeMessage) -> RuntimeMessage:
        if not isinstance(message, RuntimeMessage):
            raise TypeError(f"expected RuntimeMessage, got {type(message).__name__}")
        with self._lock:
            if self._sealed:
                raise DiagnosticsSealedError("diagnostics are sealed; the call has finished")
            self._items.append(message)
        return message

    def add(
        self,
        severity: MessageSeverity,
        origin: MessageOrigin,
        text: Optional[str] = None,
        *,
        code: MessageCode = MessageCode.UNKNOWN,
        surfaceable: bool = True,
    ) -> RuntimeMessage:
        return self.append(new_message(severity, origin, text, code=code, surfaceable=surfaceable))

    def extend(self, messages: Iterable[RuntimeMessage]) -> None:
        for message in messages:
            self.append(message)

    @property
    def messages(self) -> Tuple[RuntimeMessage, ...]:
        with self._lock:
            return tuple(self._items)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        with self._lock:
            self._sealed = True

    def surfaceable(self) -> Tuple[RuntimeMessage, ...]:
        return tuple(m for m in self.messages if m.surfaceable)

    def at_or_above(self, severity: MessageSeverity) -> Tuple[RuntimeMessage, ...]:
        return tuple(m for m in self.messages if m.severity >= severity)

    def errors(self) -> Tuple[RuntimeMessage, ...]:
        return self.at_or_above(MessageSeverity.ERROR)

    def has_errors(self) -> bool:
        return bool(self.errors())

    def with_code(self, code: MessageCode) -> Tuple[RuntimeMessage, ...]:
        return tuple(m for m in self.messages if m.code is code)

    def __iter__(self) -> Iterator[RuntimeMessage]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"DiagnosticsSink(count={len(self._items)}, sealed={self._sealed})"


__all__ = ["DiagnosticsSink", "DiagnosticsSealedError"]
