"""Accumulation of streamed deltas into a :class:`CallResponse`."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..diagnostics import DiagnosticsSink
from ..models import CallResponse, TokenUsage, ToolCall
from .response_delta import ResponseDelta, ToolCallFragment


class _PartialCall:
    __slots__ = ("id", "name", "arguments")

    def __init__(self) -> None:
        self.id: Optional[str] = None
        self.name: Optional[str] = None
        self.arguments: List[str] = []

    def merge(self, fragment: ToolCallFragment) -> None:
        if fragment.id and not self.id:
            self.id = fragment.id
        if fragment.name and not self.name:
            self.name = fragment.name
        if fragment.arguments:
            self.arguments.append(fragment.arguments)


class StreamAccumulator:
    """Fold deltas one at a time; used while forwarding them to a consumer."""

    def __init__(self, provider: str = "", model: str = "") -> None:
        self.provider = provider
        self.model = model
        self._content: List[str] = []
        self._reasoning: List[str] = []
        self._calls: Dict[int, _PartialCall] = {}
        self.finish_reason: Optional[str] = None
        self.usage: Optional[TokenUsage] = None
        self.error: Optional[str] = None
        self.count = 0

    def add(self, delta: ResponseDelta) -> None:
        self.count += 1
        if not self.provider:
            self.provider = delta.provider
        if not self.model:
            self.model = delta.model
        if delta.content:
            self._content.append(delta.content)
        if delta.reasoning:
            self._reasoning.append(delta.reasoning)
        for fragment in delta.tool_calls:
            self._calls.setdefault(fragment.index, _PartialCall()).merge(fragment)
        if delta.finish_reason is not None:
            self.finish_reason = delta.finish_reason
        if delta.usage is not None:
            self.usage = delta.usage
        if delta.error is not None:
            self.error = delta.error

    @property
    def content(self) -> str:
        return "".join(self._content)

    def tool_calls(self) -> tuple[ToolCall, ...]:
        calls = []
        for index in sorted(self._calls):
            part = self._calls[index]
            calls.append(
                ToolCall.from_raw(part.id or f"call_{index}", part.name or "", "".join(part.arguments))
            )
        return tuple(calls)

    def to_response(self, diagnostics: Optional[DiagnosticsSink] = None) -> CallResponse:
        """Build the turn response; tool calls are dropped when the stream failed."""
        finish_reason = self.finish_reason
        calls = self.tool_calls() if self.error is None else ()
        if calls and finish_reason is None:
            finish_reason = "tool_calls"
        return CallResponse(
            content=self.content,
            reasoning="".join(self._reasoning),
            usage=self.usage or TokenUsage(),
            finish_reason=finish_reason,
            provider=self.provider,
            model=self.model,
            tool_calls=calls,
            diagnostics=diagnostics if diagnostics is not None else DiagnosticsSink(),
        )


def accumulate_deltas(deltas: Iterable[ResponseDelta], diagnostics: Optional[DiagnosticsSink] = None) -> CallResponse:
    """Concatenate text, reconcile tool-call fragments by index and keep the
    last reported finish reason and usage."""
    acc = StreamAccumulator()
    for delta in deltas:
        acc.add(delta)
    return acc.to_response(diagnostics)


__all__ = ["StreamAccumulator", "accumulate_deltas"]
