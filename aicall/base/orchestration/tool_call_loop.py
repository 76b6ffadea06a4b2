"""Multi-turn tool invocation.

After each terminal provider turn the loop inspects the response. Tool calls
are validated, executed (concurrently when enabled) and answered with one
tool turn each, in the order the model requested them; the conversation is
then resubmitted. The loop ends on a response without tool calls, on an
error response, or when the round budget is exhausted.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ...config.defaults import DEFAULT_CONCURRENT_TOOL_EXECUTION, DEFAULT_MAX_TOOL_ROUNDS
from ..cancellation import CancellationToken
from ..diagnostics import MessageCode, MessageOrigin, MessageSeverity
from ..dto.tool_result import ToolResult
from ..interfaces import ProviderExecutor
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import CallRequest, CallResponse, CallStatus, Message, ToolCall
from ..repositories import ModelCapabilityRegistry
from ..tools import validate_tool_call
from .call_state import CallState

Dispatch = Callable[[CallRequest], Awaitable[CallResponse]]


class ToolCallLoop:
    """Drive provider turns until the model stops requesting tools.

    Args:
        executor: Runs the tools.
        max_rounds: Tool rounds allowed per call. A tool-call response
            received after ``max_rounds`` rounds ends the call with a fatal
            ``TOOL_BUDGET_EXCEEDED`` error.
        concurrent: Run the calls of one round with ``asyncio.gather``.
        models: Used to check tool capability requirements against the
            selected model.
    """

    def __init__(
        self,
        executor: ProviderExecutor,
        max_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        concurrent: bool = DEFAULT_CONCURRENT_TOOL_EXECUTION,
        *,
        models: Optional[ModelCapabilityRegistry] = None,
    ) -> None:
        if max_rounds < 0:
            raise ValueError("max_rounds must be >= 0")
        self.executor = executor
        self.max_rounds = max_rounds
        self.concurrent = concurrent
        self.models = models
        self.logger = get_logger("aicall.tools")

    async def run(
        self,
        request: CallRequest,
        state: CallState,
        cancellation: CancellationToken,
        dispatch: Dispatch,
    ) -> Tuple[CallResponse, CallRequest]:
        """Dispatch ``request`` and service tool calls.

        Returns the final turn response (usage summed across turns) and the
        request carrying the full conversation.

        Raises:
            CancelledError: propagated from dispatch or tool execution.
        """
        response = await dispatch(request)
        state.usage = state.usage + response.usage
        while not response.is_terminal and not response.is_error:
            if state.rounds >= self.max_rounds:
                response = CallResponse.error_response(
                    provider=response.provider,
                    model=response.model,
                    diagnostics=request.diagnostics,
                    text=f"Tool call budget exhausted after {state.rounds} rounds",
                    code=MessageCode.TOOL_BUDGET_EXCEEDED,
                    origin=MessageOrigin.TOOL,
                )
                break
            cancellation.raise_if_cancelled()
            state.transition(CallStatus.CALLING_TOOLS)
            calls = response.tool_calls
            replies = await self._run_round(request, calls, cancellation)
            request = request.append_messages(response.as_assistant_message(), *replies)
            state.request = request
            state.rounds += 1
            normalized_log_event(
                self.logger,
                "tool.round.end",
                LogContext(provider=request.provider, model=request.model, request_id=request.request_id),
                phase="tools",
                attempt=state.rounds,
                emitted=True,
                calls=len(calls),
            )
            state.transition(CallStatus.PROCESSING)
            response = await dispatch(request)
            state.usage = state.usage + response.usage
        response.usage = state.usage
        response.rounds = state.rounds
        return response, request

    async def _run_round(
        self, request: CallRequest, calls: Sequence[ToolCall], cancellation: CancellationToken
    ) -> List[Message]:
        if self.concurrent and len(calls) > 1:
            replies = await asyncio.gather(*(self._answer(request, c, cancellation) for c in calls))
            return list(replies)
        return [await self._answer(request, c, cancellation) for c in calls]

    async def _answer(self, request: CallRequest, call: ToolCall, cancellation: CancellationToken) -> Message:
        problems = validate_tool_call(call, request, self.models)
        if problems:
            request.diagnostics.extend(problems)
            result = ToolResult(
                name=call.name,
                tool_call_id=call.id,
                ok=False,
                code="validation",
                error="; ".join(m.text for m in problems),
            )
            return Message.tool(result.as_text(), tool_call_id=call.id, name=call.name)
        reply = await self.executor.exec_tool(call, cancellation, request=request)
        if reply is None:
            request.diagnostics.add(
                MessageSeverity.WARNING,
                MessageOrigin.TOOL,
                f"Tool '{call.name}' produced no result",
            )
            result = ToolResult(name=call.name, tool_call_id=call.id, ok=False, code="unknown", error="no result")
            return Message.tool(result.as_text(), tool_call_id=call.id, name=call.name)
        return reply.as_tool_message()


__all__ = ["ToolCallLoop", "Dispatch"]
