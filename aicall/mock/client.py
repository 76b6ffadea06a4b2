"""Deterministic mock provider backed by JSON fixtures for offline testing.

Purpose
-------
Implement the ``AIProvider`` and ``SupportsStreaming`` contracts without any
network traffic so the orchestrator, policies, tool loop and streaming path
can be exercised end to end. Models, defaults and responses come from a
declarative JSON catalog loaded with ``importlib.resources``.

Fixture entries
---------------
Responses are keyed by the last user message (exact, then lower-cased, then
``"*"``). An entry may carry ``text``, ``reasoning``, ``finish_reason``,
``usage``, ``stream`` (explicit text chunks), ``tool_calls`` (with a
``then`` entry used once the tool results are in the conversation) or
``error`` (``{"code": <ErrorCode value>, "message": ...}``).
"""

from __future__ import annotations

import asyncio
import json
from importlib import resources
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Tuple

from ..base.cancellation import CancellationToken
from ..base.capabilities import Capability, parse_capability
from ..base.errors import ErrorCode, ProviderError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import CallRequest, CallResponse, TokenUsage, ToolCall
from ..base.repositories import ModelEntry
from ..base.streaming import BaseStreamingAdapter, ResponseDelta, ToolCallFragment
from ..config.defaults import MOCK_DEFAULT_MODEL

_FIXTURE_PACKAGE = "aicall.mock.fixtures"
_FIXTURE_RESOURCE = "chat_completions.json"


def load_fixture_catalog(resource: str = _FIXTURE_RESOURCE) -> Dict[str, Any]:
    """Load the JSON fixture catalog bundled with the mock provider."""
    data = resources.files(_FIXTURE_PACKAGE).joinpath(resource).read_text(encoding="utf-8")
    return json.loads(data)


class MockProvider:
    """Adapter returning canned responses from fixtures instead of live APIs."""

    def __init__(
        self,
        *,
        provider: str = "mock",
        model: Optional[str] = None,
        catalog: Optional[Dict[str, Any]] = None,
        chunk_size: int = 16,
        chunk_delay: float = 0.0,
        latency: float = 0.0,
        streaming: bool = True,
    ) -> None:
        """Initialize the mock provider.

        Args:
            provider: Provider id this instance registers as.
            model: Model used when a request leaves it empty.
            catalog: Pre-parsed catalog (tests); defaults to the bundled fixture.
            chunk_size: Characters per streamed chunk when an entry has no
                explicit ``stream`` list.
            chunk_delay: Seconds slept between streamed chunks.
            latency: Seconds slept before a non-streaming response.
            streaming: Whether the provider offers a streaming adapter.
        """
        self._provider = (provider or "mock").lower()
        self._catalog = catalog if catalog is not None else load_fixture_catalog()
        providers = self._catalog.get("providers", {})
        self._block: Mapping[str, Any] = providers.get(self._provider, providers.get("*", {}))
        self._model = model or str(self._catalog.get("default_model", MOCK_DEFAULT_MODEL))
        self._responses: Mapping[str, Any] = self._block.get("responses", {})
        self.chunk_size = max(1, chunk_size)
        self.chunk_delay = chunk_delay
        self.latency = latency
        self._streaming = streaming
        self._logger = get_logger(f"aicall.mock.{self._provider}")
        self.calls: List[CallRequest] = []

    # ---- AIProvider ---------------------------------------------------------

    @property
    def name(self) -> str:
        return self._provider

    def models(self) -> Sequence[ModelEntry]:
        entries = []
        for order, item in enumerate(self._block.get("models", ())):
            entries.append(
                ModelEntry(
                    provider=self._provider,
                    name=str(item["name"]),
                    capabilities=parse_capability(item.get("capabilities")) or Capability.BASIC_CHAT,
                    default=parse_capability(item.get("default")),
                    order=order,
                )
            )
        return tuple(entries)

    async def call(self, request: CallRequest, cancellation: CancellationToken) -> CallResponse:
        self.calls.append(request)
        model = request.model or self._model
        ctx = LogContext(provider=self._provider, model=model, request_id=request.request_id)
        normalized_log_event(self._logger, "mock.call.start", ctx, phase="start", emitted=False)
        if self.latency:
            await asyncio.sleep(self.latency)
        cancellation.raise_if_cancelled()
        key, entry = self.select_entry(request)
        self._raise_if_error(entry, model)
        response = CallResponse(
            content=str(entry.get("text", "")),
            reasoning=str(entry.get("reasoning", "")),
            usage=TokenUsage.from_mapping(entry.get("usage")),
            finish_reason=entry.get("finish_reason"),
            provider=self._provider,
            model=model,
            tool_calls=self._tool_calls(entry, request),
            raw={"fixture": key},
        )
        normalized_log_event(
            self._logger, "mock.call.end", ctx, phase="finalize", emitted=True, tokens=response.usage
        )
        return response

    # ---- SupportsStreaming ----------------------------------------------------

    def supports_streaming(self) -> bool:
        return self._streaming

    def streaming_adapter(self) -> "MockStreamingAdapter":
        return MockStreamingAdapter(self)

    # ---- fixture selection ------------------------------------------------------

    def select_entry(self, request: CallRequest) -> Tuple[str, Mapping[str, Any]]:
        """Return ``(key, entry)`` for the request's conversation state."""
        prompt, answered = _last_prompt(request)
        responses = self._responses
        key = prompt if prompt in responses else prompt.lower() if prompt.lower() in responses else "*"
        entry: Mapping[str, Any] = responses.get(key) or {"text": ""}
        if entry.get("tool_calls") and (answered or not request.tools):
            entry = entry.get("then") or {"text": _summarize_tool_turns(request), "finish_reason": "stop"}
        return key, entry

    def _tool_calls(self, entry: Mapping[str, Any], request: CallRequest) -> Tuple[ToolCall, ...]:
        round_no = sum(1 for m in request.messages if m.role == "assistant" and m.tool_calls)
        calls = []
        for index, item in enumerate(entry.get("tool_calls") or ()):
            args = item.get("arguments", {})
            raw = args if isinstance(args, str) else json.dumps(args)
            calls.append(ToolCall.from_raw(item.get("id") or f"call_{round_no}_{index}", item["name"], raw))
        return tuple(calls)

    def _raise_if_error(self, entry: Mapping[str, Any], model: str) -> None:
        error = entry.get("error")
        if not error:
            return
        try:
            code = ErrorCode(str(error.get("code", "unknown")))
        except ValueError:
            code = ErrorCode.UNKNOWN
        raise ProviderError(
            code=code,
            message=str(error.get("message", "mock failure")),
            provider=self._provider,
            model=model,
            retryable=code in (ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.TRANSIENT),
        )

    async def iter_chunks(self, request: CallRequest) -> AsyncIterator[Dict[str, Any]]:
        """Native stream: reasoning, text, tool-call fragments, then finish/usage."""
        model = request.model or self._model
        _key, entry = self.select_entry(request)
        self._raise_if_error(entry, model)
        reasoning = str(entry.get("reasoning", ""))
        if reasoning:
            yield {"reasoning": reasoning}
        text = str(entry.get("text", ""))
        pieces = list(entry.get("stream") or _chunk_text(text, self.chunk_size))
        for piece in pieces:
            if self.chunk_delay:
                await asyncio.sleep(self.chunk_delay)
            yield {"content": piece}
        for index, call in enumerate(self._tool_calls(entry, request)):
            raw = call.raw_arguments or "{}"
            half = len(raw) // 2
            yield {"tool_call": {"index": index, "id": call.id, "name": call.name, "arguments": raw[:half]}}
            yield {"tool_call": {"index": index, "arguments": raw[half:]}}
        yield {"finish_reason": entry.get("finish_reason"), "usage": entry.get("usage")}


class MockStreamingAdapter(BaseStreamingAdapter):
    """Streams a fixture entry chunk by chunk through the shared adapter loop."""

    def __init__(self, provider: MockProvider) -> None:
        super().__init__(provider_name=provider.name, logger=get_logger(f"aicall.mock.{provider.name}.stream"))
        self._provider = provider

    def open_stream(self, request: CallRequest, cancellation: CancellationToken) -> AsyncIterator[Dict[str, Any]]:
        self._provider.calls.append(request)
        return self._provider.iter_chunks(request)

    def translate_chunk(self, chunk: Mapping[str, Any], request: CallRequest) -> Optional[ResponseDelta]:
        fragments: Tuple[ToolCallFragment, ...] = ()
        if "tool_call" in chunk:
            tc = chunk["tool_call"]
            fragments = (
                ToolCallFragment(index=tc["index"], id=tc.get("id"), name=tc.get("name"), arguments=tc.get("arguments", "")),
            )
        usage = chunk.get("usage")
        return ResponseDelta(
            provider=request.provider,
            model=request.model,
            content=chunk.get("content", ""),
            reasoning=chunk.get("reasoning", ""),
            tool_calls=fragments,
            finish_reason=chunk.get("finish_reason"),
            usage=TokenUsage.from_mapping(usage) if usage else None,
            raw=dict(chunk),
        )


def _chunk_text(text: str, chunk_size: int = 16) -> List[str]:
    if not text:
        return []
    return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]


def _last_prompt(request: CallRequest) -> Tuple[str, bool]:
    """Last user message text and whether tool turns followed it."""
    for pos in range(len(request.messages) - 1, -1, -1):
        message = request.messages[pos]
        if message.role == "user":
            answered = any(m.role == "tool" for m in request.messages[pos + 1 :])
            return message.content.strip() or "*", answered
    return "*", False


def _summarize_tool_turns(request: CallRequest) -> str:
    results = [m.content for m in request.messages if m.role == "tool"]
    return "Tool results: " + "; ".join(results) if results else ""


__all__ = ["MockProvider", "MockStreamingAdapter", "load_fixture_catalog"]
