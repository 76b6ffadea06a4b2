"""Pipeline stage that produced a diagnostic."""
from __future__ import annotations

from enum import Enum


class MessageOrigin(str, Enum):
    REQUEST = "request"
    RETURN = "return"
    PROVIDER = "provider"
    TOOL = "tool"
    NETWORK = "network"
    VALIDATION = "validation"

    @property
    def label(self) -> str:
        return self.value.capitalize()


__all__ = ["MessageOrigin"]
