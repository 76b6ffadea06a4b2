"""Caller-level retry around :meth:`AICallOrchestrator.run`.

Only responses failing with a retryable diagnostic (``NETWORK_TIMEOUT`` or
``RATE_LIMITED`` by default) are retried. Cancelled responses are returned
as they are. Each attempt runs with a fresh diagnostics sink seeded with the
messages of the previous attempts, so the final response still shows the
whole history.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Iterable, Optional

from ...config.defaults import DEFAULT_RETRY_DELAY_BASE, DEFAULT_RETRY_INITIAL_DELAY, DEFAULT_RETRY_MAX_ATTEMPTS
from ..cancellation import CancellationToken, CancelledError
from ..diagnostics import RETRYABLE_CODES, DiagnosticsSink, MessageCode, MessageOrigin, MessageSeverity
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import CallRequest, CallResponse
from ..timeouts import run_cancellable

if TYPE_CHECKING:
    from ..orchestration import AICallOrchestrator

_LOGGER = get_logger("aicall.retry")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy.

    Delay before attempt ``n + 1`` is ``initial_delay * delay_base ** (n - 1)``.
    """

    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    delay_base: float = DEFAULT_RETRY_DELAY_BASE
    initial_delay: float = DEFAULT_RETRY_INITIAL_DELAY
    retryable_codes: FrozenSet[MessageCode] = RETRYABLE_CODES

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def delays(self) -> Iterable[float]:
        for attempt in range(self.max_attempts - 1):
            yield self.initial_delay * self.delay_base**attempt


DEFAULT_RETRY_CONFIG = RetryConfig()


def is_retryable(response: CallResponse, config: RetryConfig = DEFAULT_RETRY_CONFIG) -> bool:
    """True when ``response`` failed with one of ``config.retryable_codes``."""
    if not response.is_error:
        return False
    return any(m.code in config.retryable_codes for m in response.diagnostics.errors())


async def call_with_retry(
    orchestrator: "AICallOrchestrator",
    request: CallRequest,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    cancellation: Optional[CancellationToken] = None,
    **run_kwargs,
) -> CallResponse:
    """Run ``request`` and retry transient failures with exponential backoff."""
    token = cancellation or CancellationToken()
    delays = list(config.delays())
    attempt_request = request
    ctx = LogContext(provider=request.provider, model=request.model, request_id=request.request_id)
    attempt = 0
    while True:
        attempt += 1
        response = await orchestrator.run(attempt_request, token, **run_kwargs)
        if attempt == config.max_attempts or not is_retryable(response, config):
            return response
        delay = delays[attempt - 1]
        sink = DiagnosticsSink(response.diagnostics.messages)
        sink.add(
            MessageSeverity.INFO,
            MessageOrigin.NETWORK,
            f"Attempt {attempt} of {config.max_attempts} failed; retrying in {delay:g}s",
            surfaceable=False,
        )
        normalized_log_event(
            _LOGGER,
            "retry.attempt",
            ctx,
            phase="retry",
            attempt=attempt,
            error_code=response.diagnostics.errors()[-1].code.name.lower(),
            emitted=False,
            delay_s=delay,
        )
        try:
            await run_cancellable(asyncio.sleep(delay), token)
        except CancelledError as exc:
            cancelled = CallResponse.cancelled_response(
                provider=response.provider, model=response.model, diagnostics=sink, reason=str(exc)
            )
            return cancelled.finish()
        attempt_request = request.replace(diagnostics=sink)


__all__ = ["RetryConfig", "DEFAULT_RETRY_CONFIG", "call_with_retry", "is_retryable"]
