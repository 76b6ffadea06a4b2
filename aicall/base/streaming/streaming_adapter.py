"""Base streaming adapter abstraction.

Provider adapters implement three hooks:

``open_stream(request, cancellation)``
    Start the native stream and return an async iterator of provider chunks.
``translate_chunk(chunk, request)``
    Map one native chunk to a :class:`ResponseDelta` (or ``None`` to skip it).
``normalize_delta(delta)``
    Optional post-processing (identity by default), e.g. splitting inline
    reasoning out of answer text.

:meth:`BaseStreamingAdapter.stream` owns the rest of the lifecycle. A producer
task reads native chunks into a bounded queue and suspends while the consumer
is behind. Text deltas are coalesced by size and by a flush timer. The
cancellation token is raced against every wait, and the sequence always ends
with exactly one terminal delta.
"""
from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Optional

from ..cancellation import CancellationToken
from ..errors import classify_exception
from ..logging import LogContext, get_logger
from ..models import CallRequest, TokenUsage
from ..tracing import open_span
from .coalescer import PendingText, TextStreamCoalescer
from .response_delta import ResponseDelta
from .streaming_finalize import finalize_stream
from .streaming_metrics import StreamMetrics
from .streaming_options import StreamingOptions

_END = object()


class _Failure:
    __slots__ = ("exc",)

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc


async def _close_native(stream: Any) -> None:
    """Close a native stream (async or sync ``close``); close errors are logged, not raised."""
    closer = getattr(stream, "aclose", None) or getattr(stream, "close", None)
    if closer is None:
        return
    try:
        result = closer()
        if inspect.isawaitable(result):
            await result
    except Exception:  # noqa: BLE001
        get_logger("aicall.streaming").debug("native stream close failed", exc_info=True)


class BaseStreamingAdapter(ABC):
    """Encapsulates the provider-independent streaming loop.

    Instances are single use: obtain a fresh adapter for every streamed turn.
    Set ``cumulative_text = True`` for providers that resend the whole text on
    every chunk; fragments are then reduced to their new suffix.
    """

    cumulative_text: bool = False

    def __init__(self, *, provider_name: str, logger: Optional[logging.Logger] = None) -> None:
        self.provider_name = provider_name
        self._logger = logger or get_logger("aicall.streaming")
        self._started = False
        self.metrics = StreamMetrics()

    @abstractmethod
    def open_stream(self, request: CallRequest, cancellation: CancellationToken) -> Any:
        """Return (or resolve to) an async iterator of native chunks."""

    @abstractmethod
    def translate_chunk(self, chunk: Any, request: CallRequest) -> Optional[ResponseDelta]:
        """Map one native chunk to a delta; ``None`` skips the chunk."""

    def normalize_delta(self, delta: ResponseDelta) -> Optional[ResponseDelta]:
        return delta

    async def stream(
        self,
        request: CallRequest,
        options: Optional[StreamingOptions] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> AsyncIterator[ResponseDelta]:
        """Yield deltas for ``request`` until exactly one terminal delta.

        Raises:
            RuntimeError: when the adapter has already been used.
        """
        if self._started:
            raise RuntimeError("streaming adapter is single use; obtain a new adapter for each stream")
        self._started = True
        opts = options or StreamingOptions()
        token = cancellation or CancellationToken()
        ctx = LogContext(provider=request.provider, model=request.model, request_id=request.request_id)
        metrics = self.metrics = StreamMetrics()
        loop = asyncio.get_running_loop()
        t0 = loop.time()
        span = open_span("aicall.stream", attributes={"provider": request.provider, "model": request.model})

        if token.cancelled:
            yield self._terminal(ctx, request, metrics, t0, error=f"cancelled:{token.reason or 'operation cancelled'}")
            span.end()
            return

        queue: asyncio.Queue = asyncio.Queue(maxsize=opts.max_buffered_deltas)
        producer = asyncio.create_task(self._produce(request, token, queue, metrics))
        cancel_waiter = asyncio.ensure_future(token.wait())
        getter: Optional[asyncio.Future] = None
        pending = PendingText()
        delay = opts.coalesce_delay_ms / 1000.0
        idle = opts.idle_timeout_seconds
        last_activity = last_emit = t0
        finish_reason: Optional[str] = None
        usage: Optional[TokenUsage] = None
        error: Optional[str] = None
        try:
            while True:
                if getter is None:
                    getter = asyncio.ensure_future(queue.get())
                now = loop.time()
                timeout: Optional[float] = None
                if pending:
                    timeout = max(0.0, last_emit + delay - now)
                if idle is not None:
                    idle_left = max(0.0, last_activity + idle - now)
                    timeout = idle_left if timeout is None else min(timeout, idle_left)
                done, _ = await asyncio.wait(
                    {getter, cancel_waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
                )
                if cancel_waiter in done:
                    error = f"cancelled:{token.reason or 'operation cancelled'}"
                    break
                if getter not in done:
                    now = loop.time()
                    if pending and now >= last_emit + delay:
                        # a pending get would hold one delta beyond the queue bound while the consumer runs
                        getter.cancel()
                        getter = None
                        last_emit = now
                        yield self._mark(self._drain(pending, request), metrics, t0, loop)
                    if idle is not None and now - last_activity >= idle:
                        error = f"timeout:No stream activity for {idle:g}s"
                        break
                    continue

                item = getter.result()
                getter = None
                last_activity = loop.time()
                if item is _END:
                    break
                if isinstance(item, _Failure):
                    error = f"{classify_exception(item.exc).value}:{item.exc}"
                    break
                if item.finish_reason is not None:
                    finish_reason = item.finish_reason
                if item.usage is not None:
                    usage = item.usage
                    metrics.input_tokens, metrics.output_tokens = usage.input_tokens, usage.output_tokens
                delta = dataclasses.replace(item, finish=False, finish_reason=None, usage=None)
                if delta.is_empty:
                    continue
                if opts.coalesce_tokens and delta.is_text_only:
                    pending.add(delta.content, delta.reasoning, last_activity)
                    if pending.size >= opts.preferred_chunk_size:
                        last_emit = last_activity
                        yield self._mark(self._drain(pending, request), metrics, t0, loop)
                    continue
                if pending:
                    yield self._mark(self._drain(pending, request), metrics, t0, loop)
                last_emit = last_activity
                yield self._mark(delta, metrics, t0, loop)

            # text received before a failure is still delivered; nothing follows a cancel
            if pending and not (error or "").startswith("cancelled:"):
                yield self._mark(self._drain(pending, request), metrics, t0, loop)
            await self._stop(producer)
            if error is not None:
                span.set_attribute("error", error)
            span.set_attribute("emitted", metrics.emitted + 1)
            span.set_attribute("peak_buffered", metrics.peak_buffered)
            yield self._terminal(ctx, request, metrics, t0, finish_reason=finish_reason, usage=usage, error=error)
        finally:
            if getter is not None:
                getter.cancel()
            cancel_waiter.cancel()
            await self._stop(producer)
            span.end()

    async def _produce(
        self,
        request: CallRequest,
        token: CancellationToken,
        queue: asyncio.Queue,
        metrics: StreamMetrics,
    ) -> None:
        native = None
        content = TextStreamCoalescer()
        reasoning = TextStreamCoalescer()
        try:
            native = self.open_stream(request, token)
            if inspect.isawaitable(native):
                native = await native
            async for chunk in native:
                if token.cancelled:
                    break
                metrics.chunks += 1
                delta = self.translate_chunk(chunk, request)
                if delta is not None:
                    delta = self.normalize_delta(delta)
                if delta is None:
                    continue
                if self.cumulative_text:
                    delta = dataclasses.replace(
                        delta, content=content.feed(delta.content), reasoning=reasoning.feed(delta.reasoning)
                    )
                if delta.is_empty:
                    continue
                await queue.put(delta)
                metrics.observe_buffer(queue.qsize())
            await queue.put(_END)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - surfaced as a terminal error delta
            await queue.put(_Failure(exc))
        finally:
            if native is not None:
                await _close_native(native)

    @staticmethod
    async def _stop(producer: asyncio.Task) -> None:
        if producer.done():
            return
        producer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await producer

    @staticmethod
    def _drain(pending: PendingText, request: CallRequest) -> ResponseDelta:
        content, reasoning = pending.drain()
        return ResponseDelta(provider=request.provider, model=request.model, content=content, reasoning=reasoning)

    @staticmethod
    def _mark(delta: ResponseDelta, metrics: StreamMetrics, t0: float, loop: asyncio.AbstractEventLoop) -> ResponseDelta:
        metrics.emitted += 1
        if metrics.time_to_first_delta_ms is None:
            metrics.time_to_first_delta_ms = (loop.time() - t0) * 1000.0
        return delta

    def _terminal(
        self,
        ctx: LogContext,
        request: CallRequest,
        metrics: StreamMetrics,
        t0: float,
        *,
        finish_reason: Optional[str] = None,
        usage: Optional[TokenUsage] = None,
        error: Optional[str] = None,
    ) -> ResponseDelta:
        metrics.total_duration_ms = (asyncio.get_running_loop().time() - t0) * 1000.0
        metrics.emitted += 1
        return finalize_stream(
            logger=self._logger,
            ctx=ctx,
            provider=request.provider,
            model=request.model,
            metrics=metrics,
            finish_reason=finish_reason,
            usage=usage,
            error=error,
        )


__all__ = ["BaseStreamingAdapter"]
