"""
CallResponse DTO representing the normalized result of a call or of one
provider turn within it.

Responses stay mutable while response policies and the tool loop work on them.
``finish`` moves the response to ``FINISHED`` and freezes it: later attribute
writes raise and the diagnostics sink is sealed. ``raw`` is kept for the
compatibility decoder and debugging but excluded from ``to_dict``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..diagnostics import DiagnosticsSink, MessageCode, MessageOrigin, MessageSeverity
from ..dto.tool_result import ToolResult
from .call_status import CallStatus
from .message import Message
from .token_usage import TokenUsage
from .tool_call import ToolCall


class ResponseFinishedError(AttributeError):
    """Raised when a finished (frozen) response is modified."""


@dataclass
class CallResponse:
    """Provider-agnostic response.

    Attributes:
        content: Final answer text.
        structured: Parsed JSON payload when an output schema was requested.
        reasoning: Reasoning text reported separately from the answer.
        usage: Token usage (summed across tool rounds for the final response).
        finish_reason: Canonical finish reason (``stop``, ``length``,
            ``tool_calls``, ``cancelled``, ``error``...).
        provider: Provider that produced the response.
        model: Resolved model name.
        tool_calls: Calls requested by the model in this turn.
        diagnostics: The call's diagnostics sink.
        status: Call status; ``FINISHED`` once frozen.
        raw: Provider native payload for diagnostics only.
        tool_call_id: For tool results, the call answered.
        tool_name: For tool results, the tool invoked.
        tool_result: For tool results, the result envelope.
        latency_ms: Wall-clock duration of the call or turn.
        rounds: Tool rounds executed before this response.
    """

    content: str = ""
    structured: Any = None
    reasoning: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: Optional[str] = None
    provider: str = ""
    model: str = ""
    tool_calls: Tuple[ToolCall, ...] = ()
    diagnostics: DiagnosticsSink = field(default_factory=DiagnosticsSink, repr=False)
    status: CallStatus = CallStatus.IDLE
    raw: Any = field(default=None, repr=False)
    tool_call_id: Optional[str] = None
    tool_name: Optional[str] = None
    tool_result: Optional[ToolResult] = None
    latency_ms: Optional[float] = None
    rounds: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_finished", False):
            raise ResponseFinishedError(f"response is finished; cannot set {name!r}")
        if name == "tool_calls":
            value = tuple(value or ())
        super().__setattr__(name, value)

    @property
    def finished(self) -> bool:
        return self.__dict__.get("_finished", False)

    @property
    def is_terminal(self) -> bool:
        """True when the model did not request any tool call."""
        return not self.tool_calls

    @property
    def is_error(self) -> bool:
        return self.finish_reason == "error"

    @property
    def is_cancelled(self) -> bool:
        return self.finish_reason == "cancelled"

    def finish(self) -> "CallResponse":
        """Enter ``FINISHED`` and freeze the response (idempotent)."""
        if self.finished:
            return self
        self.status = CallStatus.FINISHED
        self.diagnostics.seal()
        self.__dict__["_finished"] = True
        return self

    def as_assistant_message(self) -> Message:
        return Message.assistant(self.content, tuple(self.tool_calls))

    def as_tool_message(self) -> Message:
        """Tool turn answering ``tool_call_id`` (tool result responses only)."""
        if self.tool_call_id is None:
            raise ValueError("response does not carry a tool result")
        text = self.tool_result.as_text() if self.tool_result is not None else self.content
        return Message.tool(text, tool_call_id=self.tool_call_id, name=self.tool_name)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view; ``raw`` is intentionally omitted."""
        data: Dict[str, Any] = {
            "content": self.content,
            "structured": self.structured,
            "reasoning": self.reasoning or None,
            "usage": self.usage.to_dict(),
            "finish_reason": self.finish_reason,
            "provider": self.provider,
            "model": self.model,
            "tool_calls": [c.to_dict() for c in self.tool_calls],
            "status": self.status.value,
            "diagnostics": [m.to_dict() for m in self.diagnostics.messages],
            "latency_ms": self.latency_ms,
            "rounds": self.rounds,
        }
        if self.tool_result is not None:
            data["tool_result"] = self.tool_result.model_dump()
        return data

    @classmethod
    def error_response(
        cls,
        *,
        provider: str,
        model: str,
        diagnostics: DiagnosticsSink,
        text: Optional[str] = None,
        code: MessageCode = MessageCode.UNKNOWN,
        origin: MessageOrigin = MessageOrigin.PROVIDER,
    ) -> "CallResponse":
        """Build a response with ``finish_reason="error"``.

        When ``text`` is given an ERROR diagnostic is appended as well.
        """
        if text is not None:
            diagnostics.add(MessageSeverity.ERROR, origin, text, code=code)
        return cls(provider=provider, model=model, finish_reason="error", diagnostics=diagnostics)

    @classmethod
    def cancelled_response(
        cls,
        *,
        provider: str,
        model: str,
        diagnostics: DiagnosticsSink,
        reason: Optional[str] = None,
        content: str = "",
    ) -> "CallResponse":
        """Build a response with ``finish_reason="cancelled"`` and a CANCELLED warning."""
        diagnostics.add(
            MessageSeverity.WARNING,
            MessageOrigin.REQUEST,
            f"Call cancelled: {reason}" if reason else "Call cancelled",
            code=MessageCode.CANCELLED,
        )
        return cls(
            provider=provider,
            model=model,
            content=content,
            finish_reason="cancelled",
            diagnostics=diagnostics,
        )


__all__ = ["CallResponse", "ResponseFinishedError"]
