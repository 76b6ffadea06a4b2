"""
Message DTO used across the call pipeline.

A conversation is an ordered tuple of ``Message`` values. Assistant turns may
carry tool calls; tool turns answer one call through ``tool_call_id``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Tuple

from .tool_call import ToolCall

Role = Literal["system", "user", "assistant", "tool"]
CONTEXT_MESSAGE_NAME = "context"


@dataclass(frozen=True)
class Message:
    """A chat message.

    Attributes:
        role: ``"system"``, ``"user"``, ``"assistant"`` or ``"tool"``.
        content: Text content (may be empty for assistant tool-call turns).
        name: Tool name for tool turns; ``"context"`` marks an injected context turn.
        tool_call_id: Call id answered by a tool turn.
        tool_calls: Calls requested in an assistant turn.
    """

    role: Role
    content: str = ""
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: Tuple[ToolCall, ...] = ()

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def context(cls, content: str) -> "Message":
        return cls(role="system", content=content, name=CONTEXT_MESSAGE_NAME)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str = "", tool_calls: Tuple[ToolCall, ...] = ()) -> "Message":
        return cls(role="assistant", content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def tool(cls, content: str, *, tool_call_id: str, name: Optional[str] = None) -> "Message":
        return cls(role="tool", content=content, tool_call_id=tool_call_id, name=name)

    @property
    def is_context(self) -> bool:
        return self.role == "system" and self.name == CONTEXT_MESSAGE_NAME

    def text_or_joined(self) -> str:
        """Content, or the requested tool names when an assistant turn has no text."""
        if self.content or not self.tool_calls:
            return self.content
        return ", ".join(c.name for c in self.tool_calls)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.name:
            data["name"] = self.name
        if self.tool_call_id:
            data["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            data["tool_calls"] = [c.to_dict() for c in self.tool_calls]
        return data


__all__ = ["CONTEXT_MESSAGE_NAME", "Message", "Role"]
