"""Request/response DTO behaviour: validation, derivation and finishing."""
from __future__ import annotations

import pytest

from aicall.base.capabilities import Capability
from aicall.base.diagnostics import DiagnosticsSealedError, MessageCode, MessageOrigin, MessageSeverity
from aicall.base.dto import ToolResult, ToolSpec
from aicall.base.models import (
    CallRequest,
    CallResponse,
    CallStatus,
    Message,
    ResponseFinishedError,
    TokenUsage,
    ToolCall,
)
from aicall.tests.utils import assert_true, user_request


def test_request_capability_reflects_schema_and_tools():
    plain = user_request("hi")
    assert plain.capability == Capability.BASIC_CHAT  # nosec B101
    rich = user_request("hi", output_schema={"type": "object"}, tools=(ToolSpec(name="t"),))
    assert rich.capability == Capability.BASIC_CHAT | Capability.JSON_OUTPUT | Capability.FUNCTION_CALLING  # nosec B101


def test_validate_reports_each_structural_problem_once():
    request = CallRequest(provider="", messages=(), output_schema={})
    codes = [m.code for m in request.validate()]
    assert codes == [MessageCode.PROVIDER_MISSING, MessageCode.BODY_INVALID]  # nosec B101
    assert all(m.severity is MessageSeverity.ERROR for m in request.validate())  # nosec B101


def test_validate_requires_a_resolved_model():
    request = user_request("hi")
    problems = request.validate()
    assert [m.code for m in problems] == [MessageCode.NO_CAPABLE_MODEL]  # nosec B101
    assert request.with_model("mock-chat").validate() == []  # nosec B101


def test_derived_requests_share_the_diagnostics_sink():
    request = user_request("hi")
    derived = request.with_model("m").with_extra(temperature=0.2).append_messages(Message.assistant("ok"))
    assert_true(derived.diagnostics is request.diagnostics, "derived request must reuse the call's sink")
    assert derived.extra == {"temperature": 0.2}  # nosec B101
    assert [m.role for m in derived.messages] == ["user", "assistant"]  # nosec B101
    assert request.model == "" and len(request.messages) == 1  # nosec B101


def test_find_tool_by_name():
    request = user_request("hi", tools=(ToolSpec(name="a"), ToolSpec(name="b")))
    assert request.find_tool("b") is not None  # nosec B101
    assert request.find_tool("c") is None  # nosec B101


def test_tool_call_from_raw_parses_or_records_error():
    good = ToolCall.from_raw("1", "t", '{"x": 1}')
    bad = ToolCall.from_raw("2", "t", "{not json")
    listy = ToolCall.from_raw("3", "t", "[1, 2]")
    empty = ToolCall.from_raw("4", "t", "")
    assert good.arguments == {"x": 1} and good.parse_error is None  # nosec B101
    assert bad.parse_error is not None and bad.arguments == {}  # nosec B101
    assert listy.parse_error == "arguments must be a JSON object"  # nosec B101
    assert empty.arguments == {} and empty.parse_error is None  # nosec B101


def test_token_usage_accepts_both_key_styles():
    assert TokenUsage.from_mapping({"prompt_tokens": 3, "completion_tokens": 4}).total == 7  # nosec B101
    assert TokenUsage.from_mapping({"input_tokens": 1, "output_tokens": 2}) == TokenUsage(1, 2)  # nosec B101
    assert TokenUsage(1, 1) + TokenUsage(2, 3) == TokenUsage(3, 4)  # nosec B101
    assert TokenUsage.from_mapping(None) == TokenUsage()  # nosec B101


def test_finished_response_is_frozen_and_seals_diagnostics():
    response = CallResponse(content="done", finish_reason="stop")
    response.finish()
    assert response.status is CallStatus.FINISHED and response.finished  # nosec B101
    with pytest.raises(ResponseFinishedError):
        response.content = "changed"
    with pytest.raises(DiagnosticsSealedError):
        response.diagnostics.add(MessageSeverity.INFO, MessageOrigin.REQUEST, "late")
    assert response.finish() is response  # nosec B101


def test_error_and_cancelled_factories():
    request = user_request("hi")
    error = CallResponse.error_response(
        provider="mock", model="m", diagnostics=request.diagnostics, text="boom", code=MessageCode.RATE_LIMITED
    )
    assert error.is_error and not error.is_cancelled  # nosec B101
    assert request.diagnostics.errors()[-1].text == "boom"  # nosec B101

    cancelled = CallResponse.cancelled_response(
        provider="mock", model="m", diagnostics=request.diagnostics, reason="user", content="par"
    )
    assert cancelled.is_cancelled and cancelled.content == "par"  # nosec B101
    assert request.diagnostics.with_code(MessageCode.CANCELLED)[0].text == "Call cancelled: user"  # nosec B101


def test_tool_result_messages():
    ok = ToolResult(name="t", ok=True, content={"a": 1})
    failed = ToolResult(name="t", ok=False, code="timeout", error="slow")
    assert ok.as_text() == '{"a": 1}'  # nosec B101
    assert failed.as_text() == '{"error": "slow", "code": "timeout"}'  # nosec B101

    response = CallResponse(tool_call_id="c1", tool_name="t", tool_result=ok)
    message = response.as_tool_message()
    assert message.role == "tool" and message.tool_call_id == "c1" and message.content == '{"a": 1}'  # nosec B101
    with pytest.raises(ValueError):
        CallResponse(content="x").as_tool_message()


def test_assistant_message_text_or_joined():
    calls = (ToolCall.from_raw("1", "alpha", "{}"), ToolCall.from_raw("2", "beta", "{}"))
    assert Message.assistant("", calls).text_or_joined() == "alpha, beta"  # nosec B101
    assert Message.assistant("text", calls).text_or_joined() == "text"  # nosec B101


def test_response_to_dict_omits_raw():
    response = CallResponse(content="x", finish_reason="stop", raw={"secret": True}, usage=TokenUsage(1, 2))
    data = response.to_dict()
    assert "raw" not in data and data["usage"]["total_tokens"] == 3  # nosec B101
