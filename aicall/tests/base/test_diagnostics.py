"""Unit tests for the diagnostics sink and runtime messages."""
from __future__ import annotations

import pytest

from aicall.base.diagnostics import (
    DiagnosticsSealedError,
    DiagnosticsSink,
    MessageCode,
    MessageOrigin,
    MessageSeverity,
    new_message,
    render_message,
)


def test_sink_preserves_insertion_order_and_filters_by_severity():
    sink = DiagnosticsSink()
    sink.add(MessageSeverity.INFO, MessageOrigin.REQUEST, "first", surfaceable=False)
    sink.add(MessageSeverity.WARNING, MessageOrigin.RETURN, "second")
    sink.add(MessageSeverity.ERROR, MessageOrigin.PROVIDER, "third", code=MessageCode.RATE_LIMITED)

    assert [m.text for m in sink.messages] == ["first", "second", "third"]  # nosec B101
    assert [m.text for m in sink.at_or_above(MessageSeverity.WARNING)] == ["second", "third"]  # nosec B101
    assert [m.text for m in sink.surfaceable()] == ["second", "third"]  # nosec B101
    assert sink.has_errors() is True  # nosec B101
    assert sink.with_code(MessageCode.RATE_LIMITED)[0].origin is MessageOrigin.PROVIDER  # nosec B101
    assert len(sink) == 3  # nosec B101


def test_sealed_sink_rejects_appends():
    sink = DiagnosticsSink()
    sink.add(MessageSeverity.INFO, MessageOrigin.REQUEST, "kept")
    sink.seal()
    with pytest.raises(DiagnosticsSealedError):
        sink.add(MessageSeverity.WARNING, MessageOrigin.REQUEST, "rejected")
    assert [m.text for m in sink] == ["kept"]  # nosec B101


def test_append_rejects_non_messages():
    with pytest.raises(TypeError):
        DiagnosticsSink().append("not a message")  # type: ignore[arg-type]


def test_new_message_defaults_and_serialization():
    message = new_message(MessageSeverity.WARNING, MessageOrigin.TOOL, None)
    assert message.text == ""  # nosec B101
    assert message.code is MessageCode.UNKNOWN  # nosec B101
    assert message.surfaceable is True  # nosec B101
    data = new_message(
        MessageSeverity.ERROR, MessageOrigin.NETWORK, "boom", code=MessageCode.NETWORK_TIMEOUT
    ).to_dict()
    assert data == {  # nosec B101
        "severity": "error",
        "origin": "network",
        "code": int(MessageCode.NETWORK_TIMEOUT),
        "text": "boom",
        "surfaceable": True,
    }


def test_render_message_includes_code_only_when_known():
    plain = render_message(new_message(MessageSeverity.INFO, MessageOrigin.REQUEST, "hi"))
    coded = render_message(
        new_message(MessageSeverity.ERROR, MessageOrigin.REQUEST, "bad", code=MessageCode.UNKNOWN_MODEL)
    )
    assert "code=" not in plain and plain.endswith("hi")  # nosec B101
    assert coded.endswith("(code=UNKNOWN_MODEL)")  # nosec B101


def test_message_codes_keep_stable_values():
    assert int(MessageCode.PROVIDER_MISSING) == 1  # nosec B101
    assert int(MessageCode.RATE_LIMITED) == 14  # nosec B101
    assert int(MessageCode.CANCELLED) == 15  # nosec B101
    assert int(MessageCode.TOOL_BUDGET_EXCEEDED) == 16  # nosec B101
