"""Capability model public surface."""

from .core import (
    SINGLE_FLAGS,
    Capability,
    has_capability,
    missing_capabilities,
    parse_capability,
    to_detailed_string,
)

__all__ = [
    "Capability",
    "SINGLE_FLAGS",
    "has_capability",
    "missing_capabilities",
    "parse_capability",
    "to_detailed_string",
]
