"""Timeout values and cancellable awaiting.

Key Components
--------------
TimeoutConfig
    Normalized timeout values (seconds) used by the executor and streaming
    adapters.

get_timeout_config()
    Process-cached configuration; environment overrides are read on first
    use (and again whenever they change). Supported variables, all optional:
        AICALL_TIMEOUT_PROVIDER_SECONDS
        AICALL_TIMEOUT_TOOL_SECONDS
        AICALL_TIMEOUT_STREAM_IDLE_SECONDS

run_cancellable(awaitable, token, timeout)
    Await ``awaitable`` in a task raced against a cancellation token and an
    optional wall-clock deadline. On cancellation the task is cancelled and
    :class:`CancelledError` raised; on timeout the task is cancelled and
    :class:`asyncio.TimeoutError` raised.
"""
from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, TypeVar

from ..config.defaults import DEFAULT_STREAM_IDLE_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS, DEFAULT_TOOL_TIMEOUT_SECONDS
from .cancellation import CancellationToken, CancelledError

T = TypeVar("T")

_ENV_KEYS = (
    "AICALL_TIMEOUT_PROVIDER_SECONDS",
    "AICALL_TIMEOUT_TOOL_SECONDS",
    "AICALL_TIMEOUT_STREAM_IDLE_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        provider_timeout_seconds: Fallback deadline for one provider turn when
            the request carries none.
        tool_timeout_seconds: Deadline for one tool invocation unless the
            tool declares its own.
        stream_idle_timeout_seconds: Longest gap between two native stream
            chunks before the stream is failed.
    """

    provider_timeout_seconds: float = float(DEFAULT_TIMEOUT_SECONDS)
    tool_timeout_seconds: float = DEFAULT_TOOL_TIMEOUT_SECONDS
    stream_idle_timeout_seconds: float = DEFAULT_STREAM_IDLE_TIMEOUT_SECONDS


_CACHED: Optional[TimeoutConfig] = None
_ENV_GUARD: Optional[str] = None


def _parse_env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - module cache
    guard = "/".join(os.getenv(k, "") for k in _ENV_KEYS)
    if _CACHED is not None and guard == _ENV_GUARD:
        return _CACHED
    base = TimeoutConfig()
    _CACHED = TimeoutConfig(
        provider_timeout_seconds=_parse_env_float(_ENV_KEYS[0], base.provider_timeout_seconds),
        tool_timeout_seconds=_parse_env_float(_ENV_KEYS[1], base.tool_timeout_seconds),
        stream_idle_timeout_seconds=_parse_env_float(_ENV_KEYS[2], base.stream_idle_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


async def run_cancellable(
    awaitable: Awaitable[T],
    token: CancellationToken,
    timeout: Optional[float] = None,
) -> T:
    """Await ``awaitable`` until it completes, ``token`` is cancelled or ``timeout`` elapses."""
    if token.cancelled:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        token.raise_if_cancelled()
    task: "asyncio.Future[Any]" = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        if task in done:
            return task.result()
        task.cancel()
        if waiter in done:
            raise CancelledError(token.reason or "operation cancelled")
        raise asyncio.TimeoutError(f"operation exceeded {timeout}s")
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()


__all__ = ["TimeoutConfig", "get_timeout_config", "run_cancellable"]
