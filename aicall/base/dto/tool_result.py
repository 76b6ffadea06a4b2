"""Standard tool result DTO produced by tool execution.

Every tool invocation (successful, failed, rejected by validation, timed out)
yields one ``ToolResult`` so the model always receives a reply for each call
it made.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class ToolResult(BaseModel):
    """Result envelope for a tool invocation.

    Attributes:
        name: The tool name that was invoked.
        tool_call_id: Id of the call this result answers.
        ok: True when the tool executed successfully, False otherwise.
        content: Optional result payload (text or JSON-like dict).
        code: Optional error code string when ``ok`` is False.
        error: Optional human-readable error string when ``ok`` is False.
        metadata: Free-form metadata for tracing/auditing.
    """

    name: str
    tool_call_id: Optional[str] = None
    ok: bool
    content: Optional[Union[str, Dict[str, Any], list]] = None
    code: Optional[str] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def as_text(self) -> str:
        """Text form sent back to the model in the tool turn."""
        if not self.ok:
            return json.dumps({"error": self.error or "tool failed", "code": self.code}, ensure_ascii=False)
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content, ensure_ascii=False, default=str)


__all__ = ["ToolResult"]
