"""Streaming primitives: incremental response deltas.

Kept apart from the call/return DTOs so streaming concerns stay in the
streaming package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..models import TokenUsage


@dataclass(frozen=True)
class ToolCallFragment:
    """Partial tool call; fragments sharing ``index`` belong to one call."""

    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""


@dataclass(frozen=True)
class ResponseDelta:
    """Represents an incremental delta from a streaming provider.

    Fields:
      provider: canonical provider name
      model: model id/name
      content: answer text fragment (incremental)
      reasoning: reasoning text fragment (incremental)
      tool_calls: tool call fragments
      finish: True only on the single terminal delta
      finish_reason: provider finish reason when known
      usage: token usage when reported
      error: ``"<error_code>:<message>"`` on failed or cancelled streams
      raw: provider chunk (optional, for debugging)
    """

    provider: str
    model: str
    content: str = ""
    reasoning: str = ""
    tool_calls: Tuple[ToolCallFragment, ...] = ()
    finish: bool = False
    finish_reason: Optional[str] = None
    usage: Optional[TokenUsage] = None
    error: Optional[str] = None
    raw: Any = None

    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_text_only(self) -> bool:
        """True for plain content/reasoning deltas that may be coalesced."""
        return (
            not self.finish
            and not self.tool_calls
            and self.finish_reason is None
            and self.usage is None
            and self.error is None
            and bool(self.content or self.reasoning)
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.content
            or self.reasoning
            or self.tool_calls
            or self.finish
            or self.finish_reason
            or self.usage
            or self.error
        )


__all__ = ["ResponseDelta", "ToolCallFragment"]
