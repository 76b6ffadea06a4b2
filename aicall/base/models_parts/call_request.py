"""
CallRequest DTO: the provider-agnostic description of one AI call.

Requests are immutable. Policies and the tool loop derive new requests with
``replace``/``with_*`` helpers; every derived request shares the same
diagnostics sink so messages accumulate across the whole call.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple
from uuid import uuid4

from ..capabilities import Capability
from ..diagnostics import (
    SELECTION_CODES,
    DiagnosticsSink,
    MessageCode,
    MessageOrigin,
    MessageSeverity,
    RuntimeMessage,
    new_message,
)
from ..dto.tool_spec import ToolSpec
from .message import Message


@dataclass(frozen=True)
class CallRequest:
    """Immutable request envelope.

    Attributes:
        provider: Canonical provider id (e.g. ``"openai"``).
        model: Model name; empty means "use the provider default".
        messages: Conversation history, oldest first.
        output_schema: Optional JSON schema for structured output.
        tools: Tools offered to the model (``None`` for no tools).
        tool_filter: Filter expression resolved against the tool registry
            (``"*"``, ``"-*"``, ``"a,b -c"``).
        context_filter: Context provider ids to inject as a leading context
            turn, same grammar as ``tool_filter``; ``None``, blank or ``"-*"``
            injects nothing.
        timeout_seconds: Wall-clock limit for one provider turn.
        extra: Provider-agnostic options filled by policies
            (``response_schema`` envelope, sampling params).
        request_id: Correlation id used in logs.
        diagnostics: Sink shared by every request derived from this one.
    """

    provider: str = ""
    model: str = ""
    messages: Tuple[Message, ...] = ()
    output_schema: Optional[Mapping[str, Any]] = None
    tools: Optional[Tuple[ToolSpec, ...]] = None
    tool_filter: Optional[str] = None
    context_filter: Optional[str] = None
    timeout_seconds: Optional[int] = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    request_id: str = field(default_factory=lambda: uuid4().hex)
    diagnostics: DiagnosticsSink = field(default_factory=DiagnosticsSink, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "provider", (self.provider or "").strip())
        object.__setattr__(self, "model", (self.model or "").strip())
        object.__setattr__(self, "messages", tuple(self.messages))
        if self.tools is not None:
            object.__setattr__(self, "tools", tuple(self.tools))

    @property
    def capability(self) -> Capability:
        """Capabilities the request needs from the selected model."""
        required = Capability.BASIC_CHAT
        if self.output_schema is not None:
            required |= Capability.JSON_OUTPUT
        if self.tools:
            required |= Capability.FUNCTION_CALLING
        return required

    def replace(self, **changes: Any) -> "CallRequest":
        """Return a copy with ``changes`` applied; the sink is carried over."""
        changes.setdefault("diagnostics", self.diagnostics)
        return dataclasses.replace(self, **changes)

    def with_model(self, model: str) -> "CallRequest":
        return self.replace(model=model)

    def with_messages(self, messages: Iterable[Message]) -> "CallRequest":
        return self.replace(messages=tuple(messages))

    def append_messages(self, *messages: Message) -> "CallRequest":
        return self.replace(messages=self.messages + tuple(messages))

    def with_tools(self, tools: Optional[Iterable[ToolSpec]]) -> "CallRequest":
        return self.replace(tools=None if tools is None else tuple(tools))

    def with_extra(self, **values: Any) -> "CallRequest":
        merged = dict(self.extra)
        merged.update(values)
        return self.replace(extra=merged)

    def find_tool(self, name: str) -> Optional[ToolSpec]:
        for spec in self.tools or ():
            if spec.name == name:
                return spec
        return None

    def validate(self) -> List[RuntimeMessage]:
        """Structural checks run by the validation gate before dispatch.

        Returns new ERROR messages for problems not already recorded in the
        sink; nothing is appended here.
        """
        recorded = {m.code for m in self.diagnostics.errors()}
        selection_failed = bool(recorded & SELECTION_CODES)
        problems: List[RuntimeMessage] = []

        def _err(code: MessageCode, text: str) -> None:
            if code not in recorded:
                problems.append(new_message(MessageSeverity.ERROR, MessageOrigin.VALIDATION, text, code=code))
                recorded.add(code)

        if not self.provider:
            _err(MessageCode.PROVIDER_MISSING, "No provider was specified for the request")
        if not self.messages:
            _err(MessageCode.BODY_INVALID, "At least one interaction is required")
        if self.output_schema is not None and not self.output_schema:
            _err(MessageCode.BODY_INVALID, "JsonOutput capability requires a non-empty JsonOutputSchema")
        if self.provider and not self.model and not selection_failed:
            _err(MessageCode.NO_CAPABLE_MODEL, f"No model could be resolved for provider '{self.provider}'")
        return problems


__all__ = ["CallRequest"]
