"""Provider-agnostic tool specification DTO.

A ``ToolSpec`` is the schema-only view of a tool that travels with a request
and is handed to providers. The executable handler lives on
:class:`aicall.base.tools.AITool`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..capabilities import Capability


class ToolSpec(BaseModel):
    """Tool name, description, JSON-schema parameters and capability needs.

    Attributes:
        name: Unique tool name (non-empty).
        description: Human readable summary shown to the model.
        parameters: JSON schema of the arguments object.
        required_capabilities: Model capabilities needed to call the tool.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    required_capabilities: int = int(Capability.FUNCTION_CALLING)

    @field_validator("parameters")
    @classmethod
    def _object_schema(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if value and value.get("type", "object") != "object":
            raise ValueError("tool parameters schema must describe an object")
        return value

    @property
    def capabilities(self) -> Capability:
        return Capability(self.required_capabilities)

    def to_function(self) -> Dict[str, Any]:
        """Render as a ``{"type": "function", ...}`` tool entry."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters or {"type": "object", "properties": {}},
            },
        }

    def describe(self) -> Optional[str]:
        return self.description or None


__all__ = ["ToolSpec"]
