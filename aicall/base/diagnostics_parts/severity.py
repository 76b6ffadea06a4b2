"""Diagnostic severity levels (ordered)."""
from __future__ import annotations

from enum import IntEnum


class MessageSeverity(IntEnum):
    """Severity of a runtime message; ordering supports "at or above" checks."""

    INFO = 0
    WARNING = 1
    ERROR = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


__all__ = ["MessageSeverity"]
