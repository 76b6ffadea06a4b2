"""Unit tests covering the deterministic mock provider fixtures and routing."""

from __future__ import annotations

import pytest

from aicall.base.cancellation import CancellationToken
from aicall.base.capabilities import Capability
from aicall.base.dto import ToolSpec
from aicall.base.errors import ErrorCode, ProviderError
from aicall.base.models import Message, ToolCall
from aicall.base.streaming import StreamingOptions, accumulate_deltas
from aicall.mock import MockProvider, MockStreamingAdapter
from aicall.tests.utils import collect, user_request


def test_catalog_models_and_defaults():
    entries = {e.name: e for e in MockProvider().models()}
    assert set(entries) == {"mock-chat", "mock-lite", "mock-reasoner"}  # nosec B101
    assert entries["mock-chat"].supports(Capability.FUNCTION_CALLING | Capability.STREAMING)  # nosec B101
    assert not entries["mock-lite"].supports(Capability.STREAMING)  # nosec B101
    assert entries["mock-reasoner"].is_default_for(Capability.REASONING)  # nosec B101
    assert [e.order for e in MockProvider().models()] == [0, 1, 2]  # nosec B101


def test_wildcard_provider_block_serves_any_name():
    provider = MockProvider(provider="Echo")
    assert provider.name == "echo" and provider.models()[0].provider == "echo"  # nosec B101


def test_select_entry_exact_then_lowercase_then_wildcard():
    provider = MockProvider()
    assert provider.select_entry(user_request("hello"))[0] == "hello"  # nosec B101
    assert provider.select_entry(user_request("  HELLO "))[0] == "hello"  # nosec B101
    assert provider.select_entry(user_request("anything else"))[0] == "*"  # nosec B101


def test_tool_entry_switches_to_follow_up_once_answered():
    provider = MockProvider()
    prompt = "What is the weather in Paris?"
    first = user_request(prompt, tools=(ToolSpec(name="get_weather"),))
    assert provider.select_entry(first)[1].get("tool_calls")  # nosec B101

    call = ToolCall.from_raw("call_0_0", "get_weather", '{"city": "Paris"}')
    answered = first.with_messages(
        first.messages + (Message.assistant("", tool_calls=(call,)), Message.tool("sunny", tool_call_id="call_0_0"))
    )
    assert provider.select_entry(answered)[1]["text"] == "It is sunny in Paris."  # nosec B101


@pytest.mark.asyncio
async def test_call_returns_fixture_response():
    provider = MockProvider()
    response = await provider.call(user_request("hello", model="mock-chat"), CancellationToken())
    assert response.content == "Hello from the mock provider."  # nosec B101
    assert response.usage.input_tokens == 3 and response.usage.output_tokens == 6  # nosec B101
    assert response.raw == {"fixture": "hello"} and len(provider.calls) == 1  # nosec B101


@pytest.mark.asyncio
async def test_call_raises_fixture_errors():
    with pytest.raises(ProviderError) as info:
        await MockProvider().call(user_request("fail with rate limit"), CancellationToken())
    assert info.value.code is ErrorCode.RATE_LIMIT and info.value.retryable  # nosec B101


@pytest.mark.asyncio
async def test_iter_chunks_order():
    provider = MockProvider(chunk_size=5)
    chunks = await collect(provider.iter_chunks(user_request("think first")))
    assert chunks[0] == {"reasoning": "2 + 2 is 4."}  # nosec B101
    assert "".join(c.get("content", "") for c in chunks) == "The answer is 4."  # nosec B101
    assert "finish_reason" in chunks[-1]  # nosec B101


@pytest.mark.asyncio
async def test_streaming_adapter_reassembles_tool_calls():
    provider = MockProvider()
    adapter = provider.streaming_adapter()
    assert isinstance(adapter, MockStreamingAdapter)  # nosec B101
    request = user_request("What is the weather in Paris?", model="mock-chat", tools=(ToolSpec(name="get_weather"),))
    deltas = await collect(adapter.stream(request, StreamingOptions(), CancellationToken()))
    response = accumulate_deltas(deltas)
    assert [c.name for c in response.tool_calls] == ["get_weather"]  # nosec B101
    assert response.tool_calls[0].arguments == {"city": "Paris"}  # nosec B101
    assert response.tool_calls[0].id == "call_0_0"  # nosec B101
    assert provider.calls == [request]  # nosec B101


def test_custom_catalog():
    catalog = {"providers": {"solo": {"models": [{"name": "solo-1"}], "responses": {"*": {"text": "ok"}}}}}
    provider = MockProvider(provider="solo", catalog=catalog, streaming=False)
    assert [m.name for m in provider.models()] == ["solo-1"]  # nosec B101
    assert provider.models()[0].capabilities == Capability.BASIC_CHAT  # nosec B101
    assert provider.supports_streaming() is False  # nosec B101
