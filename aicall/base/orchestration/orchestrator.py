"""Call orchestrator.

Flow of one call::

    IDLE -> PROCESSING -> request policies -> validation gate
         -> turn (streamed or not) -> response policies
         -> tool rounds (CALLING_TOOLS -> PROCESSING -> turn ...)
         -> FINISHED

``run`` never raises for provider, policy or tool failures; those end up as
diagnostics on the returned response. Cancellation at any point produces a
``cancelled`` response that keeps every diagnostic recorded so far.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, Optional, Union

from ..cancellation import CancellationToken, CancelledError
from ..capabilities import Capability
from ..diagnostics import MessageCode, MessageOrigin, MessageSeverity
from ..errors import ErrorCode, to_message_code, to_message_origin
from ..interfaces import ProviderExecutor
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..models import CallRequest, CallResponse, CallStatus
from ..policies import PolicyContext, PolicyPipeline
from ..registry import ContextRegistry, ProviderRegistry, ToolRegistry
from ..repositories import ModelCapabilityRegistry
from ..streaming import BaseStreamingAdapter, ResponseDelta, StreamAccumulator, StreamingOptions
from ..tracing import start_span
from .call_state import CallState, StatusCallback
from .tool_call_loop import ToolCallLoop

if TYPE_CHECKING:
    from ...config.settings import OrchestrationSettings

DeltaCallback = Callable[[ResponseDelta], Any]


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 3)


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


class AICallOrchestrator:
    """Run AI calls through policies, providers and tools.

    The pipeline and registries are shared, read-mostly components; every
    call owns its request, response, diagnostics sink and :class:`CallState`.
    """

    def __init__(
        self,
        executor: ProviderExecutor,
        pipeline: Optional[PolicyPipeline] = None,
        *,
        models: Optional[ModelCapabilityRegistry] = None,
        tools: Optional[ToolRegistry] = None,
        providers: Optional[ProviderRegistry] = None,
        contexts: Optional[ContextRegistry] = None,
        settings: Optional["OrchestrationSettings"] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if settings is None:
            from ...config.settings import OrchestrationSettings

            settings = OrchestrationSettings()
        self.executor = executor
        self.settings = settings
        self.pipeline = pipeline if pipeline is not None else PolicyPipeline.default(settings)
        self.providers = providers
        self.models = models if models is not None else (providers.models if providers is not None else None)
        self.tools = tools
        self.contexts = contexts
        self.tool_loop = ToolCallLoop(
            executor,
            settings.max_tool_rounds,
            settings.concurrent_tool_execution,
            models=self.models,
        )
        self.logger = logger or get_logger("aicall.orchestrator")

    # ---- public API --------------------------------------------------------

    async def run(
        self,
        request: CallRequest,
        cancellation: Optional[CancellationToken] = None,
        *,
        stream: bool = False,
        options: Optional[StreamingOptions] = None,
        on_delta: Optional[DeltaCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> CallResponse:
        """Execute one call and return its finished response.

        Args:
            request: The call to run.
            cancellation: Token observed by every stage.
            stream: Prefer the streaming path when the provider and model allow it.
            options: Streaming options (defaults from settings).
            on_delta: Receives every streamed delta; may be a coroutine function.
            on_status: Receives every status change.
        """
        token = cancellation or CancellationToken()
        state = CallState(on_status=on_status, request=request)
        ctx = LogContext(provider=request.provider, model=request.model, request_id=request.request_id)
        start = time.perf_counter()
        log_event(self.logger, "call.start", ctx, stream=stream, messages=len(request.messages))
        with start_span(
            "aicall.call",
            attributes={"provider": request.provider, "model": request.model, "stream": stream},
        ) as span:
            try:
                state.transition(CallStatus.PROCESSING)
                response = await self._execute(request, state, token, stream, options, on_delta)
            except CancelledError as exc:
                current = state.request or request
                response = CallResponse.cancelled_response(
                    provider=current.provider,
                    model=current.model,
                    diagnostics=request.diagnostics,
                    reason=str(exc) or token.reason,
                    content=state.partial_content,
                )
                response.usage = state.usage
                response.rounds = state.rounds
            response.latency_ms = _elapsed_ms(start)
            state.transition(CallStatus.FINISHED)
            response.finish()
            span.set_attribute("finish_reason", response.finish_reason or "")
            span.set_attribute("rounds", response.rounds)
        ctx.model = response.model or ctx.model
        normalized_log_event(
            self.logger,
            "call.end",
            ctx,
            phase="finalize",
            attempt=response.rounds,
            error_code=_first_error_code(response),
            emitted=bool(response.content or response.structured is not None),
            tokens=response.usage,
            level=logging.WARNING if response.is_error else logging.INFO,
            finish_reason=response.finish_reason,
            duration_ms=response.latency_ms,
        )
        return response

    async def stream_events(
        self,
        request: CallRequest,
        cancellation: Optional[CancellationToken] = None,
        *,
        options: Optional[StreamingOptions] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> AsyncIterator[Union[ResponseDelta, CallResponse]]:
        """Yield streamed deltas as they arrive and, last, the final response.

        Closing the iterator early cancels the call.
        """
        token = cancellation.child() if cancellation is not None else CancellationToken()
        opts = options or self.settings.streaming
        queue: asyncio.Queue = asyncio.Queue(maxsize=opts.max_buffered_deltas)
        task = asyncio.ensure_future(
            self.run(request, token, stream=True, options=opts, on_delta=queue.put, on_status=on_status)
        )
        try:
            while True:
                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
                if getter in done:
                    yield getter.result()
                    continue
                getter.cancel()
                while not queue.empty():
                    yield queue.get_nowait()
                yield task.result()
                return
        finally:
            if not task.done():
                token.cancel("event stream closed by consumer")
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

    # ---- call flow -----------------------------------------------------------

    async def _execute(
        self,
        request: CallRequest,
        state: CallState,
        token: CancellationToken,
        stream: bool,
        options: Optional[StreamingOptions],
        on_delta: Optional[DeltaCallback],
    ) -> CallResponse:
        # a retried request arrives with the previous attempts' messages already in its sink
        mark = len(request.diagnostics)
        context = self._context(request, token)
        request = await self.pipeline.apply_request_policies(context)
        state.request = request

        request.diagnostics.extend(request.validate())
        if any(m.severity is MessageSeverity.ERROR for m in request.diagnostics.messages[mark:]):
            token.raise_if_cancelled()
            return CallResponse.error_response(
                provider=request.provider, model=request.model, diagnostics=request.diagnostics
            )

        async def dispatch(turn_request: CallRequest) -> CallResponse:
            state.request = turn_request
            response = await self._turn(turn_request, state, token, stream, options, on_delta)
            turn_context = self._context(turn_request, token)
            turn_context.response = response
            await self.pipeline.apply_response_policies(turn_context)
            return response

        response, _ = await self.tool_loop.run(request, state, token, dispatch)
        return response

    async def _turn(
        self,
        request: CallRequest,
        state: CallState,
        token: CancellationToken,
        stream: bool,
        options: Optional[StreamingOptions],
        on_delta: Optional[DeltaCallback],
    ) -> CallResponse:
        state.partial_content = ""
        adapter = self._streaming_adapter(request, state) if stream else None
        if adapter is not None:
            return await self._stream_turn(adapter, request, state, token, options, on_delta)
        response = await self.executor.exec_provider(request, token)
        if response is None:
            return CallResponse.error_response(
                provider=request.provider,
                model=request.model,
                diagnostics=request.diagnostics,
                text="Provider returned no response",
                code=MessageCode.RETURN_INVALID,
            )
        return response

    def _streaming_adapter(self, request: CallRequest, state: CallState) -> Optional[BaseStreamingAdapter]:
        """Streaming adapter for this turn, or ``None`` after noting why streaming is skipped."""
        code: Optional[MessageCode] = None
        text = ""
        registration = self.providers.registration(request.provider) if self.providers is not None else None
        disabled = {p.lower() for p in self.settings.streaming_disabled_providers}
        if request.provider.lower() in disabled or (
            registration is not None and not (registration.streaming_supported and registration.streaming_enabled)
        ):
            code = MessageCode.STREAMING_DISABLED_PROVIDER
            text = f"Streaming is disabled for provider '{request.provider}'; using a non-streaming call"
        else:
            entry = self.models.get(request.provider, request.model) if self.models is not None else None
            if entry is not None and not entry.supports(Capability.STREAMING):
                code = MessageCode.STREAMING_UNSUPPORTED_MODEL
                text = f"Model '{request.model}' does not support streaming; using a non-streaming call"
        adapter = None
        if code is None:
            adapter = self.executor.try_get_streaming_adapter(request)
            if adapter is None:
                code = MessageCode.STREAMING_DISABLED_PROVIDER
                text = f"Streaming is unavailable for provider '{request.provider}'; using a non-streaming call"
        if code is not None and not state.streaming_noted:
            state.streaming_noted = True
            request.diagnostics.add(MessageSeverity.INFO, MessageOrigin.REQUEST, text, code=code)
        return adapter

    async def _stream_turn(
        self,
        adapter: BaseStreamingAdapter,
        request: CallRequest,
        state: CallState,
        token: CancellationToken,
        options: Optional[StreamingOptions],
        on_delta: Optional[DeltaCallback],
    ) -> CallResponse:
        start = time.perf_counter()
        acc = StreamAccumulator(request.provider, request.model)
        deltas = adapter.stream(request, options or self.settings.streaming, token)
        try:
            async for delta in deltas:
                if not delta.finish:
                    state.transition(CallStatus.STREAMING)
                acc.add(delta)
                state.partial_content = acc.content
                if on_delta is not None:
                    await _maybe_await(on_delta(delta))
        finally:
            await deltas.aclose()

        if acc.error is not None:
            prefix, _, message = acc.error.partition(":")
            if prefix == ErrorCode.CANCELLED.value:
                raise CancelledError(message or token.reason or "operation cancelled")
            try:
                code = ErrorCode(prefix)
            except ValueError:
                code, message = ErrorCode.UNKNOWN, acc.error
            response = CallResponse.error_response(
                provider=request.provider,
                model=request.model,
                diagnostics=request.diagnostics,
                text=f"Stream from provider '{request.provider}' failed: {message}",
                code=to_message_code(code),
                origin=to_message_origin(code),
            )
            response.content = acc.content
        else:
            response = acc.to_response(request.diagnostics)
            response.provider = response.provider or request.provider
            response.model = response.model or request.model
        response.latency_ms = _elapsed_ms(start)
        return response

    def _context(self, request: CallRequest, token: CancellationToken) -> PolicyContext:
        return PolicyContext(
            request=request,
            models=self.models,
            tools=self.tools,
            providers=self.providers,
            contexts=self.contexts,
            settings=self.settings,
            cancellation=token,
        )


def _first_error_code(response: CallResponse) -> Optional[str]:
    if response.is_cancelled:
        return MessageCode.CANCELLED.name.lower()
    if not response.is_error:
        return None
    errors = response.diagnostics.errors()
    return errors[0].code.name.lower() if errors else MessageCode.UNKNOWN.name.lower()


__all__ = ["AICallOrchestrator", "DeltaCallback"]
