"""Cooperative cancellation token implementation.

A single ``CancellationToken`` is threaded through the orchestrator, policies,
the provider executor, streaming adapters and tool invocations. It can be
polled (``cancelled`` / ``raise_if_cancelled``), observed through callbacks,
or awaited from any event loop with :meth:`CancellationToken.wait`.
"""

from __future__ import annotations

import asyncio
from threading import Lock
from typing import Callable, List

from .cancelled_error import CancelledError
from .state import State

Callback = Callable[[str | None], None]


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe: ``cancel`` may be called from any thread. Child tokens inherit
    cancellation when the parent is cancelled.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callback] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation, run callbacks and cascade to children."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback(reason)
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def add_callback(self, callback: Callback) -> None:
        """Register ``callback(reason)``; runs immediately if already cancelled."""
        with self._lock:
            if not self._state.cancelled:
                self._callbacks.append(callback)
                return
            reason = self._state.reason
        callback(reason)

    def remove_callback(self, callback: Callback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    async def wait(self) -> str | None:
        """Suspend until cancellation is requested and return the reason.

        Safe to await from any event loop; a ``cancel`` issued on another
        thread wakes the waiter through ``call_soon_threadsafe``.
        """
        if self._state.cancelled:
            return self._state.reason
        loop = asyncio.get_running_loop()
        event = asyncio.Event()

        def _wake(_reason: str | None) -> None:
            loop.call_soon_threadsafe(event.set)

        self.add_callback(_wake)
        try:
            await event.wait()
        finally:
            self.remove_callback(_wake)
        return self._state.reason

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken"]
