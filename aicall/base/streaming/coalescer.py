"""Text coalescing helpers for streaming.

``TextStreamCoalescer`` turns a provider's text fragments into incremental
pieces when the provider may resend the full text so far (cumulative
streams). ``PendingText`` buffers incremental pieces between emissions.
"""
from __future__ import annotations

from typing import List, Optional


class TextStreamCoalescer:
    """Normalize cumulative or incremental fragments to incremental ones.

    Rules for each incoming fragment against the text accumulated so far:
      - it extends the accumulated text: cumulative, emit only the new suffix;
      - the accumulated text already starts with it: a regression, emit nothing;
      - otherwise: incremental, append and emit as-is.
    """

    def __init__(self) -> None:
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    def feed(self, incoming: Optional[str]) -> str:
        if not incoming:
            return ""
        current = self._text
        if current and incoming.startswith(current):
            self._text = incoming
            return incoming[len(current):]
        if current.startswith(incoming):
            return ""
        self._text = current + incoming
        return incoming

    def reset(self) -> None:
        self._text = ""


class PendingText:
    """Content and reasoning fragments waiting to be emitted together."""

    def __init__(self) -> None:
        self._content: List[str] = []
        self._reasoning: List[str] = []
        self._size = 0
        self.since: Optional[float] = None

    def add(self, content: str, reasoning: str, now: float) -> None:
        if content:
            self._content.append(content)
        if reasoning:
            self._reasoning.append(reasoning)
        self._size += len(content) + len(reasoning)
        if self.since is None:
            self.since = now

    @property
    def size(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def drain(self) -> tuple[str, str]:
        content, reasoning = "".join(self._content), "".join(self._reasoning)
        self._content.clear()
        self._reasoning.clear()
        self._size = 0
        self.since = None
        return content, reasoning


__all__ = ["TextStreamCoalescer", "PendingText"]
