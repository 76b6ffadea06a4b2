"""Default provider executor.

Dispatches provider turns and tool invocations. Every call is raced against
the cancellation token and a wall-clock deadline; cancellation surfaces as
:class:`CancelledError`, every other failure is turned into a response with
``finish_reason == "error"`` plus a classified diagnostic.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from ..cancellation import CancellationToken, CancelledError
from ..capabilities import Capability
from ..diagnostics import DiagnosticsSink, MessageCode, MessageOrigin, MessageSeverity
from ..dto.tool_result import ToolResult
from ..errors import ErrorCode, classify_exception, to_message_code, to_message_origin
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import CallRequest, CallResponse, ToolCall
from ..registry import ProviderRegistry, ToolRegistry
from ..streaming import BaseStreamingAdapter
from ..timeouts import TimeoutConfig, get_timeout_config, run_cancellable
from ..tracing import start_span


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 3)


class DefaultProviderExecutor:
    """:class:`ProviderExecutor` backed by the provider and tool registries."""

    def __init__(
        self,
        providers: ProviderRegistry,
        tools: Optional[ToolRegistry] = None,
        timeouts: Optional[TimeoutConfig] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.providers = providers
        self.tools = tools if tools is not None else ToolRegistry()
        self.timeouts = timeouts or get_timeout_config()
        self.logger = logger or get_logger("aicall.executor")

    # ---- providers -------------------------------------------------------

    async def exec_provider(
        self, request: Optional[CallRequest], cancellation: CancellationToken
    ) -> Optional[CallResponse]:
        """Run one provider turn for ``request``.

        Returns ``None`` for a ``None`` request.

        Raises:
            CancelledError: when ``cancellation`` fires before or during the call.
        """
        if request is None:
            return None
        cancellation.raise_if_cancelled()
        sink = request.diagnostics
        ctx = LogContext(provider=request.provider, model=request.model, request_id=request.request_id)
        provider = self.providers.get(request.provider)
        if provider is None:
            return CallResponse.error_response(
                provider=request.provider,
                model=request.model,
                diagnostics=sink,
                text=f"Unknown provider '{request.provider}'",
                code=MessageCode.UNKNOWN_PROVIDER,
                origin=MessageOrigin.REQUEST,
            )

        timeout = float(request.timeout_seconds or self.timeouts.provider_timeout_seconds)
        start = time.perf_counter()
        normalized_log_event(self.logger, "provider.exec.start", ctx, phase="start", emitted=False)
        with start_span(
            "aicall.provider.exec",
            attributes={"provider": request.provider, "model": request.model, "timeout_s": timeout},
        ):
            try:
                response = await run_cancellable(provider.call(request, cancellation), cancellation, timeout)
            except CancelledError:
                normalized_log_event(
                    self.logger,
                    "provider.exec.cancelled",
                    ctx,
                    phase="finalize",
                    error_code=ErrorCode.CANCELLED.value,
                    emitted=False,
                    duration_ms=_elapsed_ms(start),
                )
                raise
            except Exception as exc:  # noqa: BLE001 - converted to an error response
                return self._provider_failure(request, ctx, exc, timeout, start)

        if response is None:
            return CallResponse.error_response(
                provider=request.provider,
                model=request.model,
                diagnostics=sink,
                text="Provider returned no response",
                code=MessageCode.RETURN_INVALID,
                origin=MessageOrigin.PROVIDER,
            )
        self._attach(response, request, start)
        normalized_log_event(
            self.logger,
            "provider.exec.end",
            ctx,
            phase="finalize",
            emitted=bool(response.content or response.tool_calls),
            tokens=response.usage,
            duration_ms=response.latency_ms,
            finish_reason=response.finish_reason,
        )
        return response

    def _provider_failure(
        self, request: CallRequest, ctx: LogContext, exc: Exception, timeout: float, start: float
    ) -> CallResponse:
        code = classify_exception(exc)
        if isinstance(exc, asyncio.TimeoutError):
            text = f"Provider '{request.provider}' did not respond within {timeout:g}s"
        else:
            text = f"Provider '{request.provider}' call failed: {exc}"
        normalized_log_event(
            self.logger,
            "provider.exec.error",
            ctx,
            phase="finalize",
            error_code=code.value,
            emitted=False,
            level=logging.ERROR,
            duration_ms=_elapsed_ms(start),
            error=f"{type(exc).__name__}: {exc}",
        )
        response = CallResponse.error_response(
            provider=request.provider,
            model=request.model,
            diagnostics=request.diagnostics,
            text=text,
            code=to_message_code(code),
            origin=to_message_origin(code),
        )
        response.latency_ms = _elapsed_ms(start)
        return response

    @staticmethod
    def _attach(response: CallResponse, request: CallRequest, start: float) -> None:
        """Bind the response to the request's sink and fill missing identity fields."""
        if response.diagnostics is not request.diagnostics:
            request.diagnostics.extend(response.diagnostics.messages)
            response.diagnostics = request.diagnostics
        if not response.provider:
            response.provider = request.provider
        if not response.model:
            response.model = request.model
        if response.latency_ms is None:
            response.latency_ms = _elapsed_ms(start)

    # ---- tools -----------------------------------------------------------

    async def exec_tool(
        self,
        tool_call: Optional[ToolCall],
        cancellation: CancellationToken,
        *,
        request: Optional[CallRequest] = None,
    ) -> Optional[CallResponse]:
        """Invoke the registered tool for ``tool_call``.

        Plain handlers run in a worker thread, coroutine handlers are awaited.
        The outcome is always a response carrying a :class:`ToolResult`.

        Raises:
            CancelledError: when ``cancellation`` fires before or during the call.
        """
        if tool_call is None:
            return None
        cancellation.raise_if_cancelled()
        sink = request.diagnostics if request is not None else DiagnosticsSink()
        ctx = LogContext(
            provider=request.provider if request else None,
            model=request.model if request else None,
            request_id=request.request_id if request else None,
            extra={"tool": tool_call.name, "tool_call_id": tool_call.id},
        )
        start = time.perf_counter()
        tool = self.tools.get(tool_call.name)
        if tool is None:
            sink.add(
                MessageSeverity.WARNING,
                MessageOrigin.TOOL,
                f"Tool '{tool_call.name}' is not registered",
                code=MessageCode.TOOL_VALIDATION_ERROR,
            )
            result = ToolResult(
                name=tool_call.name, tool_call_id=tool_call.id, ok=False, code="not_found", error="unknown tool"
            )
            return self._tool_response(tool_call, result, sink, request, start)

        timeout = tool.timeout_seconds or self.timeouts.tool_timeout_seconds
        args = dict(tool_call.arguments)
        normalized_log_event(self.logger, "tool.exec.start", ctx, phase="start", emitted=False)
        with start_span("aicall.tool.exec", attributes={"tool": tool.name, "timeout_s": timeout}):
            try:
                awaitable: Any = tool.handler(args) if tool.is_async else asyncio.to_thread(tool.handler, args)
                value = await run_cancellable(awaitable, cancellation, timeout)
            except CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001 - reported to the model as a failed tool result
                code = classify_exception(exc)
                if isinstance(exc, asyncio.TimeoutError):
                    error = f"Tool '{tool.name}' timed out after {timeout:g}s"
                else:
                    error = f"Tool '{tool.name}' failed: {exc}"
                sink.add(MessageSeverity.WARNING, MessageOrigin.TOOL, error, code=to_message_code(code))
                normalized_log_event(
                    self.logger,
                    "tool.exec.error",
                    ctx,
                    phase="finalize",
                    error_code=code.value,
                    emitted=False,
                    level=logging.WARNING,
                    error=f"{type(exc).__name__}: {exc}",
                )
                result = ToolResult(
                    name=tool.name, tool_call_id=tool_call.id, ok=False, code=code.value, error=error
                )
                return self._tool_response(tool_call, result, sink, request, start)

        result = value if isinstance(value, ToolResult) else ToolResult(
            name=tool.name, tool_call_id=tool_call.id, ok=True, content=_tool_content(value)
        )
        normalized_log_event(
            self.logger,
            "tool.exec.end",
            ctx,
            phase="finalize",
            emitted=True,
            duration_ms=_elapsed_ms(start),
            ok=result.ok,
        )
        return self._tool_response(tool_call, result, sink, request, start)

    @staticmethod
    def _tool_response(
        tool_call: ToolCall,
        result: ToolResult,
        sink: DiagnosticsSink,
        request: Optional[CallRequest],
        start: float,
    ) -> CallResponse:
        if result.tool_call_id is None:
            result = result.model_copy(update={"tool_call_id": tool_call.id})
        return CallResponse(
            content=result.as_text(),
            provider=request.provider if request else "",
            model=request.model if request else "",
            finish_reason="stop" if result.ok else "error",
            diagnostics=sink,
            tool_call_id=tool_call.id,
            tool_name=tool_call.name,
            tool_result=result,
            latency_ms=_elapsed_ms(start),
        )

    # ---- streaming -------------------------------------------------------

    def try_get_streaming_adapter(self, request: CallRequest) -> Optional[BaseStreamingAdapter]:
        """Fresh streaming adapter for ``request`` or ``None`` when streaming is unavailable.

        Uses the capability resolved at registration; a registered model that
        does not declare ``STREAMING`` also yields ``None``.
        """
        registration = self.providers.registration(request.provider)
        if registration is None or not (registration.streaming_supported and registration.streaming_enabled):
            return None
        entry = self.providers.models.get(request.provider, request.model)
        if entry is not None and not entry.supports(Capability.STREAMING):
            return None
        return registration.provider.streaming_adapter()  # type: ignore[attr-defined]


def _tool_content(value: Any) -> Any:
    if value is None or isinstance(value, (str, dict, list)):
        return value
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return str(value)


__all__ = ["DefaultProviderExecutor"]
