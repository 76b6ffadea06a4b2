"""Validation of model-requested tool calls before execution."""
from __future__ import annotations

from typing import List, Optional

from ..capabilities import has_capability, missing_capabilities, to_detailed_string
from ..diagnostics import MessageCode, MessageOrigin, MessageSeverity, RuntimeMessage, new_message
from ..models import CallRequest, ToolCall
from ..repositories import ModelCapabilityRegistry
from .schema_validation import validate_against_schema


def _error(text: str) -> RuntimeMessage:
    return new_message(MessageSeverity.ERROR, MessageOrigin.TOOL, text, code=MessageCode.TOOL_VALIDATION_ERROR)


def validate_tool_call(
    call: ToolCall,
    request: CallRequest,
    models: Optional[ModelCapabilityRegistry] = None,
) -> List[RuntimeMessage]:
    """Check that ``call`` may run for ``request``.

    Checks, in order: the tool was offered in the request, its arguments
    parsed as a JSON object, they match the tool's parameter schema, and the
    selected model has the capabilities the tool requires. Returns ERROR
    messages with code ``TOOL_VALIDATION_ERROR``; empty means valid.
    """
    spec = request.find_tool(call.name)
    if spec is None:
        return [_error(f"Tool '{call.name}' is not available for this request")]
    if call.parse_error is not None:
        return [_error(f"Arguments for tool '{call.name}' are not valid JSON: {call.parse_error}")]

    problems: List[RuntimeMessage] = []
    schema = spec.parameters or {}
    if schema.get("required") and not call.arguments:
        problems.append(_error(f"Tool '{call.name}' requires arguments but none were provided"))
    else:
        violations = validate_against_schema(dict(call.arguments), schema)
        if violations:
            problems.append(
                _error(f"Arguments for tool '{call.name}' do not match schema: {'; '.join(violations)}")
            )

    if models is not None:
        entry = models.get(request.provider, request.model)
        if entry is not None and not has_capability(entry.capabilities, spec.capabilities):
            lacking = missing_capabilities(entry.capabilities, spec.capabilities)
            problems.append(
                _error(
                    f"Selected model '{request.model}' on provider '{request.provider}' does not support "
                    f"required capabilities ({to_detailed_string(lacking)}) for tool '{call.name}'"
                )
            )
    return problems


__all__ = ["validate_tool_call"]
