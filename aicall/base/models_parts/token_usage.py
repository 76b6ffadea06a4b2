"""Token accounting for one provider turn or a whole call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        if not isinstance(other, TokenUsage):
            return NotImplemented
        return TokenUsage(self.input_tokens + other.input_tokens, self.output_tokens + other.output_tokens)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "TokenUsage":
        """Accept OpenAI style (``prompt_tokens``) or neutral (``input_tokens``) keys."""
        if not data:
            return cls()
        inp = data.get("input_tokens", data.get("prompt_tokens")) or 0
        out = data.get("output_tokens", data.get("completion_tokens")) or 0
        return cls(int(inp), int(out))

    def to_dict(self) -> Dict[str, int]:
        return {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens, "total_tokens": self.total}


__all__ = ["TokenUsage"]
