"""
ToolCall DTO: one function invocation requested by the model.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class ToolCall:
    """A model-requested tool invocation.

    Attributes:
        id: Provider assigned call id; echoed back in the tool turn.
        name: Tool name.
        arguments: Parsed arguments object (empty when parsing failed).
        raw_arguments: Argument text as produced by the model.
        parse_error: Reason the raw arguments could not be parsed, if any.
    """

    id: str
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    raw_arguments: Optional[str] = None
    parse_error: Optional[str] = None

    @classmethod
    def from_raw(cls, id: str, name: str, raw_arguments: Any) -> "ToolCall":  # noqa: A002 - mirrors wire field
        """Build from unparsed argument text (or an already decoded mapping)."""
        if isinstance(raw_arguments, Mapping):
            return cls(id=id, name=name, arguments=dict(raw_arguments), raw_arguments=json.dumps(raw_arguments))
        text = (raw_arguments or "").strip()
        if not text:
            return cls(id=id, name=name, arguments={}, raw_arguments=raw_arguments)
        try:
            parsed = json.loads(text)
        except ValueError as exc:
            return cls(id=id, name=name, raw_arguments=raw_arguments, parse_error=str(exc))
        if not isinstance(parsed, dict):
            return cls(id=id, name=name, raw_arguments=raw_arguments, parse_error="arguments must be a JSON object")
        return cls(id=id, name=name, arguments=parsed, raw_arguments=raw_arguments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "arguments": dict(self.arguments),
        }


__all__ = ["ToolCall"]
