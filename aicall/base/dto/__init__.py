"""Pydantic DTOs shared between the core and provider adapters."""

from .tool_result import ToolResult
from .tool_spec import ToolSpec

__all__ = ["ToolResult", "ToolSpec"]
