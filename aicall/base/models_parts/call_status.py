"""Lifecycle status of a single AI call."""
from __future__ import annotations

from enum import Enum

_DESCRIPTIONS = {
    "idle": "Idle",
    "processing": "Processing",
    "streaming": "Streaming",
    "calling_tools": "Calling tools",
    "finished": "Finished",
}


class CallStatus(str, Enum):
    """Call status; the string value is the persisted form."""

    IDLE = "idle"
    PROCESSING = "processing"
    STREAMING = "streaming"
    CALLING_TOOLS = "calling_tools"
    FINISHED = "finished"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.value]

    @classmethod
    def from_string(cls, value: str | None) -> "CallStatus":
        """Parse a persisted value; unknown or empty values map to ``IDLE``."""
        key = (value or "").strip().lower().replace(" ", "_").replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.IDLE

    def __str__(self) -> str:
        return self.value


__all__ = ["CallStatus"]
