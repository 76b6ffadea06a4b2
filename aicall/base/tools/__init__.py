"""Tool model, filter expressions and validation."""

from .ai_tool import AITool, ToolHandler
from .schema_validation import validate_against_schema
from .tool_filter import ToolFilter
from .tool_validation import validate_tool_call

__all__ = ["AITool", "ToolHandler", "ToolFilter", "validate_against_schema", "validate_tool_call"]
