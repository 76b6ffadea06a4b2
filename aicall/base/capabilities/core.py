"""Capability bitset & helpers.

A model or request capability is a combination of :class:`Capability`
flags. Composites such as ``BASIC_CHAT`` are plain unions, so "does this
model cover what the request needs" is a subset check.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Optional, Tuple


class Capability(IntFlag):
    """Model feature flags."""

    NONE = 0
    TEXT_INPUT = 1 << 0
    IMAGE_INPUT = 1 << 1
    AUDIO_INPUT = 1 << 2
    JSON_INPUT = 1 << 3
    TEXT_OUTPUT = 1 << 4
    IMAGE_OUTPUT = 1 << 5
    AUDIO_OUTPUT = 1 << 6
    JSON_OUTPUT = 1 << 7
    FUNCTION_CALLING = 1 << 8
    REASONING = 1 << 9
    STREAMING = 1 << 10

    BASIC_CHAT = TEXT_INPUT | TEXT_OUTPUT
    TOOL_USE = FUNCTION_CALLING
    SCHEMA_OUTPUT = JSON_OUTPUT
    TOOL_CHAT = BASIC_CHAT | FUNCTION_CALLING
    REASONING_CHAT = BASIC_CHAT | REASONING
    TOOL_REASONING_CHAT = TOOL_CHAT | REASONING
    TEXT_TO_JSON = TEXT_INPUT | JSON_OUTPUT
    TEXT_TO_IMAGE = TEXT_INPUT | IMAGE_OUTPUT
    TEXT_TO_SPEECH = TEXT_INPUT | AUDIO_OUTPUT
    SPEECH_TO_TEXT = AUDIO_INPUT | TEXT_OUTPUT
    IMAGE_TO_TEXT = IMAGE_INPUT | TEXT_OUTPUT


SINGLE_FLAGS: Tuple[Capability, ...] = (
    Capability.TEXT_INPUT,
    Capability.IMAGE_INPUT,
    Capability.AUDIO_INPUT,
    Capability.JSON_INPUT,
    Capability.TEXT_OUTPUT,
    Capability.IMAGE_OUTPUT,
    Capability.AUDIO_OUTPUT,
    Capability.JSON_OUTPUT,
    Capability.FUNCTION_CALLING,
    Capability.REASONING,
    Capability.STREAMING,
)


def has_capability(available: Capability | int, required: Optional[Capability | int]) -> bool:
    """Return ``True`` when ``available`` covers every flag in ``required``.

    An absent requirement (``None``) is always satisfied.
    """
    if required is None:
        return True
    required = int(required)
    return (int(available) & required) == required


def missing_capabilities(available: Capability | int, required: Capability | int) -> Capability:
    """Flags in ``required`` that ``available`` lacks."""
    return Capability(int(required) & ~int(available))


def to_detailed_string(capability: Capability | int) -> str:
    """Comma separated single-flag names, ``"None"`` for the empty set."""
    value = int(capability)
    names = [flag.name for flag in SINGLE_FLAGS if value & int(flag)]
    return ", ".join(names) if names else "None"


def parse_capability(text: str | None) -> Capability:
    """Parse ``"BASIC_CHAT, streaming"`` style config values.

    Separators may be commas, pipes or whitespace; names are case-insensitive
    and may use CamelCase (``BasicChat``).

    Raises:
        ValueError: when a name does not match a known capability.
    """
    result = Capability.NONE
    if not text:
        return result
    for raw in text.replace("|", ",").replace(" ", ",").split(","):
        token = raw.strip()
        if not token:
            continue
        key = _to_member_name(token)
        try:
            result |= Capability[key]
        except KeyError:
            raise ValueError(f"unknown capability: {token!r}") from None
    return result


def _to_member_name(token: str) -> str:
    if "_" in token or token.isupper():
        return token.upper()
    out = []
    for i, ch in enumerate(token):
        if ch.isupper() and i and not token[i - 1].isupper():
            out.append("_")
        out.append(ch.upper())
    return "".join(out)


__all__ = [
    "Capability",
    "SINGLE_FLAGS",
    "has_capability",
    "missing_capabilities",
    "to_detailed_string",
    "parse_capability",
]
