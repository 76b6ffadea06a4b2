"""Shared testing utilities for the aicall test suite.

Purpose:
    Avoid duplicating small helpers across test modules while keeping
    explicit ``AssertionError`` semantics (no bare ``assert`` in helpers, to
    satisfy Bandit B101).

Exports:
    - assert_true(condition: bool, message: str) -> None
    - user_request(prompt, **changes) -> CallRequest
    - collect(async_iterable) -> list
    - StaticContext(provider_id, values): fixed-value context provider
"""
from __future__ import annotations

from typing import Any, AsyncIterable, Dict, List, Mapping

from aicall.base.models import CallRequest, Message


def assert_true(condition: bool, message: str) -> None:
    """Raise AssertionError with the provided message if condition is False.

    Parameters
    ----------
    condition: bool
        Boolean expression under test.
    message: str
        Rich, contextual diagnostic message to display on failure.

    Raises
    ------
    AssertionError
        If `condition` evaluates false.
    """
    if not condition:
        raise AssertionError(message)


def user_request(prompt: str, **changes: Any) -> CallRequest:
    """Single user turn request; ``provider`` defaults to ``"mock"``."""
    changes.setdefault("provider", "mock")
    return CallRequest(messages=(Message.user(prompt),), **changes)


async def collect(stream: AsyncIterable[Any]) -> List[Any]:
    return [item async for item in stream]


class StaticContext:
    """Context provider returning a fixed mapping."""

    def __init__(self, provider_id: str, values: Mapping[str, Any]) -> None:
        self.provider_id = provider_id
        self.values: Dict[str, Any] = dict(values)

    def get_context(self) -> Mapping[str, Any]:
        return self.values
