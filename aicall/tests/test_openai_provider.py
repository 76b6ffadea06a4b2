"""OpenAI adapter tests against an in-memory stand-in for ``AsyncOpenAI``.

No network: the fake client records the parameters passed to
``chat.completions.create`` and returns canned completions or chunk streams.
"""
from __future__ import annotations

import types
from typing import Any, Dict, List, Optional

import pytest

from aicall.base.cancellation import CancellationToken
from aicall.base.diagnostics import MessageCode
from aicall.base.dto import ToolSpec
from aicall.base.errors import ErrorCode, ProviderError
from aicall.base.models import Message, ToolCall
from aicall.base.policies.request.schema_attach import RESPONSE_SCHEMA_KEY
from aicall.base.streaming import StreamingOptions, accumulate_deltas
from aicall.config.settings import OrchestrationSettings
from aicall.di import AICallContainer
from aicall.openai import OpenAIProvider, OpenAIStreamingAdapter, ThinkTagSplitter
from aicall.openai.stream_helpers import translate_openai_chunk
from aicall.openai.style_helpers import build_chat_params, to_openai_message
from aicall.tests.utils import collect, user_request


class _Completion:
    def __init__(self, data: Dict[str, Any]) -> None:
        self._data = data

    def model_dump(self) -> Dict[str, Any]:
        return dict(self._data)


class _FakeCompletions:
    def __init__(self, result: Any = None, chunks: Optional[List[Any]] = None, error: Optional[Exception] = None):
        self.result = result
        self.chunks = chunks or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **params: Any) -> Any:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        if params.get("stream"):
            return self._iterate()
        return self.result

    async def _iterate(self):
        for chunk in self.chunks:
            yield chunk


def _client(**kwargs: Any) -> Any:
    return types.SimpleNamespace(chat=types.SimpleNamespace(completions=_FakeCompletions(**kwargs)))


def _chunk(content: str = "", *, finish: Optional[str] = None, tool_calls=None, usage=None) -> Dict[str, Any]:
    if usage is not None:
        return {"choices": [], "usage": usage}
    delta: Dict[str, Any] = {"content": content}
    if tool_calls:
        delta["tool_calls"] = tool_calls
    return {"model": "gpt-4o-mini", "choices": [{"delta": delta, "finish_reason": finish}]}


COMPLETION = {
    "id": "chatcmpl-1",
    "model": "gpt-4o-mini",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "Bonjour"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 5, "completion_tokens": 2},
}


# ---- request translation -----------------------------------------------------------


def test_build_chat_params_maps_tools_schema_and_options():
    spec = ToolSpec(name="lookup", description="Find things", parameters={"type": "object", "properties": {}})
    envelope = {"name": "answer", "schema": {"type": "object"}, "strict": True, "wrapper": None}
    request = user_request(
        "hi",
        provider="openai",
        tools=(spec,),
        timeout_seconds=30,
        extra={"temperature": 0.2, "seed": None, RESPONSE_SCHEMA_KEY: envelope},
    )
    params = build_chat_params("gpt-4o-mini", request)
    assert params["messages"] == [{"role": "user", "content": "hi"}]  # nosec B101
    assert params["tools"][0]["function"]["name"] == "lookup"  # nosec B101
    assert params["response_format"]["json_schema"]["name"] == "answer"  # nosec B101
    assert params["temperature"] == 0.2 and "seed" not in params  # nosec B101
    assert params["timeout"] == 30.0 and "stream" not in params  # nosec B101

    streamed = build_chat_params("gpt-4o-mini", request, stream=True)
    assert streamed["stream"] is True and streamed["stream_options"] == {"include_usage": True}  # nosec B101


def test_tool_turns_render_in_wire_shape():
    call = ToolCall.from_raw("call_1", "lookup", '{"q": "x"}')
    assistant = to_openai_message(Message.assistant("", tool_calls=(call,)))
    tool = to_openai_message(Message.tool("found", tool_call_id="call_1"))
    assert assistant["content"] is None  # nosec B101
    assert assistant["tool_calls"][0]["function"] == {"name": "lookup", "arguments": '{"q": "x"}'}  # nosec B101
    assert tool == {"role": "tool", "content": "found", "tool_call_id": "call_1"}  # nosec B101


# ---- provider ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_call_forwards_request_and_returns_raw_completion():
    client = _client(result=_Completion(COMPLETION))
    provider = OpenAIProvider(client=client)
    response = await provider.call(user_request("hi", provider="openai"), CancellationToken())
    assert response.raw == COMPLETION and response.model == "gpt-4o-mini"  # nosec B101
    assert client.chat.completions.calls[0]["model"] == "gpt-4o-mini"  # nosec B101


@pytest.mark.asyncio
async def test_missing_api_key_fails_with_auth_error():
    provider = OpenAIProvider()
    assert provider.supports_streaming() is False  # nosec B101
    with pytest.raises(ProviderError) as info:
        await provider.call(user_request("hi", provider="openai"), CancellationToken())
    assert info.value.code is ErrorCode.AUTH  # nosec B101


@pytest.mark.asyncio
async def test_sdk_failures_are_classified():
    failure = RuntimeError("Rate limit reached for requests")
    provider = OpenAIProvider(client=_client(error=failure))
    with pytest.raises(ProviderError) as info:
        await provider.call(user_request("hi", provider="openai"), CancellationToken())
    assert info.value.code is ErrorCode.RATE_LIMIT and info.value.retryable  # nosec B101
    assert info.value.raw is failure  # nosec B101


def test_declared_models_and_default_entry(monkeypatch):
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
    provider = OpenAIProvider(client=_client(), models=[{"name": "o3-mini", "capabilities": "ReasoningChat"}])
    names = [m.name for m in provider.models()]
    assert names == ["gpt-4.1", "o3-mini"] and provider.default_model() == "gpt-4.1"  # nosec B101


@pytest.mark.asyncio
async def test_empty_model_resolves_to_the_configured_model_among_declared_ones():
    declared = [
        {"name": "o3-mini", "capabilities": "BasicChat"},
        {"name": "gpt-4.1", "capabilities": "BasicChat"},
    ]
    client = _client(result=_Completion(COMPLETION))
    provider = OpenAIProvider(model="gpt-4.1", client=client, models=declared)
    settings = OrchestrationSettings(enabled_providers=("openai",))
    orchestrator = AICallContainer(settings, providers=[provider]).orchestrator()
    await orchestrator.run(user_request("hi", provider="openai"))
    assert client.chat.completions.calls[0]["model"] == "gpt-4.1"  # nosec B101


@pytest.mark.asyncio
async def test_orchestrated_call_decodes_raw_completion():
    provider = OpenAIProvider(client=_client(result=_Completion(COMPLETION)))
    settings = OrchestrationSettings(enabled_providers=("openai",))
    orchestrator = AICallContainer(settings, providers=[provider]).orchestrator()
    response = await orchestrator.run(user_request("hi", provider="openai"))
    assert response.content == "Bonjour" and response.finish_reason == "stop"  # nosec B101
    assert response.usage.total == 7 and response.model == "gpt-4o-mini"  # nosec B101


@pytest.mark.asyncio
async def test_orchestrated_call_without_key_reports_authentication():
    settings = OrchestrationSettings(enabled_providers=("openai",))
    orchestrator = AICallContainer(settings, providers=[OpenAIProvider()]).orchestrator()
    response = await orchestrator.run(user_request("hi", provider="openai"), stream=True)
    assert response.is_error  # nosec B101
    assert response.diagnostics.errors()[0].code is MessageCode.AUTHENTICATION_MISSING  # nosec B101


# ---- streaming ----------------------------------------------------------------------------


def test_translate_chunk_variants():
    delta = translate_openai_chunk(_chunk("Hi", finish="stop"), "openai", "m")
    assert delta.content == "Hi" and delta.finish_reason == "stop" and delta.model == "gpt-4o-mini"  # nosec B101
    usage = translate_openai_chunk(_chunk(usage={"prompt_tokens": 4, "completion_tokens": 1}), "openai", "m")
    assert usage.usage.total == 5 and usage.content == ""  # nosec B101
    assert translate_openai_chunk({"choices": []}, "openai", "m") is None  # nosec B101


def test_think_tag_splitter_handles_tags_across_chunks():
    splitter = ThinkTagSplitter()
    parts = [splitter.feed(text) for text in ("Sure <thi", "nk>plan", " it</th", "ink> done")]
    content = "".join(c for c, _ in parts)
    reasoning = "".join(r for _, r in parts)
    assert content == "Sure  done" and reasoning == "plan it"  # nosec B101
    assert splitter.flush() == ("", "")  # nosec B101


def test_think_tag_splitter_flushes_unfinished_tag_as_text():
    splitter = ThinkTagSplitter()
    assert splitter.feed("a <th") == ("a ", "")  # nosec B101
    assert splitter.flush() == ("<th", "")  # nosec B101


@pytest.mark.asyncio
async def test_streaming_adapter_emits_text_reasoning_tools_and_usage():
    chunks = [
        _chunk("<think>hmm</think>Hel"),
        _chunk("lo"),
        _chunk(tool_calls=[{"index": 0, "id": "c1", "function": {"name": "lookup", "arguments": '{"q":'}}]),
        _chunk(tool_calls=[{"index": 0, "function": {"arguments": ' "x"}'}}], finish="tool_calls"),
        _chunk(usage={"prompt_tokens": 6, "completion_tokens": 3}),
    ]
    client = _client(chunks=chunks)
    adapter = OpenAIStreamingAdapter(client, default_model="gpt-4o-mini")
    request = user_request("hi", provider="openai", model="gpt-4o-mini")
    deltas = await collect(adapter.stream(request, StreamingOptions(coalesce_tokens=False), CancellationToken()))

    response = accumulate_deltas(deltas)
    assert response.content == "Hello" and response.reasoning == "hmm"  # nosec B101
    assert response.tool_calls[0].arguments == {"q": "x"}  # nosec B101
    assert response.finish_reason == "tool_calls" and response.usage.total == 9  # nosec B101
    assert client.chat.completions.calls[0]["stream"] is True  # nosec B101


@pytest.mark.asyncio
async def test_provider_streaming_through_orchestrator():
    chunks = [_chunk("Bon"), _chunk("jour", finish="stop"), _chunk(usage={"prompt_tokens": 2, "completion_tokens": 2})]
    provider = OpenAIProvider(client=_client(chunks=chunks))
    settings = OrchestrationSettings(enabled_providers=("openai",))
    orchestrator = AICallContainer(settings, providers=[provider]).orchestrator()
    deltas = []
    response = await orchestrator.run(user_request("hi", provider="openai"), stream=True, on_delta=deltas.append)
    assert response.content == "Bonjour" and response.usage.total == 4  # nosec B101
    assert deltas[-1].finish and deltas[-1].finish_reason == "stop"  # nosec B101
