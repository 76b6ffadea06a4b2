"""Tests for the provider-independent streaming loop in BaseStreamingAdapter."""

from __future__ import annotations

import asyncio

import pytest

from aicall.base.cancellation import CancellationToken
from aicall.base.models import TokenUsage
from aicall.base.streaming import StreamingOptions, ToolCallFragment
from aicall.tests.streaming.helpers import FakeStreamingAdapter, text_delta
from aicall.tests.utils import assert_true, collect, user_request

REQUEST = user_request("stream please", model="fake-1")


def _contents(deltas):
    return [d.content for d in deltas if not d.finish]


@pytest.mark.asyncio
async def test_single_character_fragments_coalesce_into_one_delta():
    token = CancellationToken()
    adapter = FakeStreamingAdapter(list("abcdefghij"), hang=True)
    opts = StreamingOptions(coalesce_delay_ms=40, preferred_chunk_size=64)
    loop = asyncio.get_running_loop()
    started = loop.time()
    received = []
    async for delta in adapter.stream(REQUEST, opts, token):
        if not received:
            elapsed = loop.time() - started
            token.cancel("done")
        received.append(delta)
    assert _contents(received) == ["abcdefghij"]  # nosec B101
    assert 0.03 <= elapsed < 1.0  # nosec B101
    assert adapter.metrics.chunks == 10  # nosec B101


@pytest.mark.asyncio
async def test_fragments_drain_at_completion_before_the_window():
    adapter = FakeStreamingAdapter(list("abcdefghij"))
    opts = StreamingOptions(coalesce_delay_ms=10_000, preferred_chunk_size=100)
    deltas = await collect(adapter.stream(REQUEST, opts))
    assert _contents(deltas) == ["abcdefghij"]  # nosec B101
    terminal = deltas[-1]
    assert terminal.finish and terminal.error is None  # nosec B101
    assert adapter.metrics.emitted == 2 and adapter.metrics.chunks == 10  # nosec B101


@pytest.mark.asyncio
async def test_preferred_chunk_size_triggers_flush():
    adapter = FakeStreamingAdapter(["ab", "cd", "ef"])
    opts = StreamingOptions(coalesce_delay_ms=10_000, preferred_chunk_size=4)
    deltas = await collect(adapter.stream(REQUEST, opts))
    assert _contents(deltas) == ["abcd", "ef"]  # nosec B101


@pytest.mark.asyncio
async def test_coalescing_timer_flushes_without_new_fragments():
    adapter = FakeStreamingAdapter(["a", "b", "c"], delay=0.08)
    opts = StreamingOptions(coalesce_delay_ms=5, preferred_chunk_size=100)
    deltas = await collect(adapter.stream(REQUEST, opts))
    assert _contents(deltas) == ["a", "b", "c"]  # nosec B101


@pytest.mark.asyncio
async def test_non_text_delta_flushes_pending_text_in_order():
    fragment = ToolCallFragment(index=0, id="c1", name="lookup", arguments="{}")
    chunks = [
        "Let me ",
        "check.",
        text_delta(tool_calls=(fragment,)),
        text_delta(finish_reason="tool_calls", usage=TokenUsage(4, 2)),
    ]
    adapter = FakeStreamingAdapter(chunks)
    deltas = await collect(adapter.stream(REQUEST, StreamingOptions(coalesce_delay_ms=10_000)))
    assert [d.content for d in deltas[:2]] == ["Let me check.", ""]  # nosec B101
    assert deltas[1].tool_calls == (fragment,)  # nosec B101
    terminal = deltas[-1]
    assert len(deltas) == 3 and terminal.finish  # nosec B101
    assert terminal.finish_reason == "tool_calls" and terminal.usage == TokenUsage(4, 2)  # nosec B101
    assert adapter.metrics.tokens() == {"prompt": 4, "completion": 2, "total": 6}  # nosec B101


@pytest.mark.asyncio
async def test_exactly_one_terminal_delta():
    adapter = FakeStreamingAdapter([text_delta("x", finish=True, finish_reason="stop")])
    deltas = await collect(adapter.stream(REQUEST))
    assert sum(1 for d in deltas if d.finish) == 1 and deltas[-1].finish_reason == "stop"  # nosec B101


@pytest.mark.asyncio
async def test_backpressure_bounds_buffered_deltas():
    adapter = FakeStreamingAdapter([str(i) for i in range(20)])
    opts = StreamingOptions(coalesce_tokens=False, max_buffered_deltas=2)
    received = []
    async for delta in adapter.stream(REQUEST, opts):
        received.append(delta)
        await asyncio.sleep(0.005)
    assert len(received) == 21  # nosec B101
    assert_true(
        0 < adapter.metrics.peak_buffered <= 2,
        f"peak_buffered {adapter.metrics.peak_buffered} exceeds max_buffered_deltas",
    )


@pytest.mark.asyncio
async def test_timer_flush_keeps_the_producer_within_the_buffer_bound():
    tools = [
        text_delta(tool_calls=(ToolCallFragment(index=i, id=f"c{i}", name="lookup", arguments="{}"),))
        for i in range(8)
    ]
    adapter = FakeStreamingAdapter(["a", 0.02, *tools])
    opts = StreamingOptions(coalesce_delay_ms=5, max_buffered_deltas=2)
    received = []
    worst = 0
    async for delta in adapter.stream(REQUEST, opts):
        received.append(delta)
        await asyncio.sleep(0.1)
        worst = max(worst, len(adapter.produced) - len(received))
    assert _contents(received)[0] == "a" and len(received) == 10  # nosec B101
    # the queue plus the one delta the suspended producer is holding
    assert_true(worst <= opts.max_buffered_deltas + 1, f"{worst} deltas pulled ahead of the consumer")


@pytest.mark.asyncio
async def test_fragment_after_a_quiet_gap_flushes_without_waiting_a_window():
    token = CancellationToken()
    adapter = FakeStreamingAdapter([0.3, "a"], hang=True)
    opts = StreamingOptions(coalesce_delay_ms=200, preferred_chunk_size=64)
    loop = asyncio.get_running_loop()
    started = loop.time()
    received = []
    async for delta in adapter.stream(REQUEST, opts, token):
        if not received:
            elapsed = loop.time() - started
            token.cancel("done")
        received.append(delta)
    assert _contents(received) == ["a"]  # nosec B101
    assert elapsed < 0.45  # nosec B101


@pytest.mark.asyncio
async def test_cancel_stops_the_stream_within_one_coalescing_window():
    token = CancellationToken()
    adapter = FakeStreamingAdapter(["a"], hang=True)
    opts = StreamingOptions(coalesce_delay_ms=40, preferred_chunk_size=64)
    loop = asyncio.get_running_loop()
    cancelled_at = []

    def stop() -> None:
        cancelled_at.append(loop.time())
        token.cancel("user stop")

    loop.call_later(0.01, stop)
    deltas = await collect(adapter.stream(REQUEST, opts, token))
    ended = loop.time()
    assert len(deltas) == 1 and deltas[0].error == "cancelled:user stop"  # nosec B101
    assert ended - cancelled_at[0] < opts.coalesce_delay_ms / 1000.0  # nosec B101
    assert adapter.closed  # nosec B101


@pytest.mark.asyncio
async def test_cancellation_ends_with_cancelled_terminal_and_closes_stream():
    token = CancellationToken()
    adapter = FakeStreamingAdapter(["first"], hang=True)
    opts = StreamingOptions(coalesce_tokens=False)
    received = []
    async for delta in adapter.stream(REQUEST, opts, token):
        received.append(delta)
        if not delta.finish:
            token.cancel("user stop")
    terminal = received[-1]
    assert terminal.finish and terminal.error == "cancelled:user stop"  # nosec B101
    assert terminal.finish_reason == "cancelled"  # nosec B101
    assert adapter.closed  # nosec B101


@pytest.mark.asyncio
async def test_pre_cancelled_token_never_opens_the_stream():
    token = CancellationToken()
    token.cancel("early")
    adapter = FakeStreamingAdapter(["never"])
    deltas = await collect(adapter.stream(REQUEST, cancellation=token))
    assert len(deltas) == 1 and deltas[0].error == "cancelled:early"  # nosec B101
    assert adapter.produced == []  # nosec B101


@pytest.mark.asyncio
async def test_mid_stream_failure_becomes_terminal_error_delta():
    adapter = FakeStreamingAdapter(["partial", RuntimeError("rate limit exceeded")])
    deltas = await collect(adapter.stream(REQUEST, StreamingOptions(coalesce_delay_ms=10_000)))
    assert _contents(deltas) == ["partial"]  # nosec B101
    terminal = deltas[-1]
    assert terminal.error == "rate_limit:rate limit exceeded" and terminal.finish_reason == "error"  # nosec B101


@pytest.mark.asyncio
async def test_idle_timeout_fails_the_stream():
    adapter = FakeStreamingAdapter(["a"], hang=True)
    opts = StreamingOptions(coalesce_tokens=False, idle_timeout_seconds=0.05)
    deltas = await collect(adapter.stream(REQUEST, opts))
    assert deltas[-1].error.startswith("timeout:")  # nosec B101
    assert adapter.closed  # nosec B101


@pytest.mark.asyncio
async def test_consumer_early_exit_stops_the_producer():
    adapter = FakeStreamingAdapter(["a", "b"], hang=True)
    stream = adapter.stream(REQUEST, StreamingOptions(coalesce_tokens=False))
    first = await stream.__anext__()
    assert first.content == "a"  # nosec B101
    await stream.aclose()
    assert adapter.closed  # nosec B101


@pytest.mark.asyncio
async def test_cumulative_text_is_reduced_to_suffixes():
    adapter = FakeStreamingAdapter(["He", "Hello", "Hello wo", "Hello world"], cumulative=True)
    deltas = await collect(adapter.stream(REQUEST, StreamingOptions(coalesce_tokens=False)))
    assert _contents(deltas) == ["He", "llo", " wo", "rld"]  # nosec B101


@pytest.mark.asyncio
async def test_adapter_is_single_use():
    adapter = FakeStreamingAdapter(["x"])
    await collect(adapter.stream(REQUEST))
    with pytest.raises(RuntimeError):
        await collect(adapter.stream(REQUEST))
