"""Decode provider-native payloads left behind by thin adapters.

Adapters may return a response whose ``content`` is empty and whose ``raw``
holds an OpenAI-style chat completion mapping. This policy fills the
normalized fields from that mapping and, when an output schema was attached,
parses the answer text into ``structured`` (unwrapping wrapped roots).
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional

from ...diagnostics import MessageCode, MessageOrigin, MessageSeverity
from ...models import CallResponse, TokenUsage, ToolCall
from ..policy_base import ResponsePolicy
from ..policy_context import PolicyContext
from ..request.schema_attach import RESPONSE_SCHEMA_KEY

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _as_mapping(raw: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(raw, Mapping):
        return raw
    dump = getattr(raw, "model_dump", None)
    if callable(dump):
        data = dump()
        return data if isinstance(data, Mapping) else None
    return None


def strip_code_fence(text: str) -> str:
    stripped = text.strip()
    match = _FENCE.match(stripped)
    return match.group(1) if match else stripped


def decode_chat_completion(response: CallResponse, raw: Mapping[str, Any]) -> bool:
    """Populate ``response`` from a chat completion mapping; return True when anything was decoded."""
    choices = raw.get("choices") or []
    if not choices:
        return False
    choice = choices[0] or {}
    message = choice.get("message") or {}
    decoded = False
    content = message.get("content")
    if isinstance(content, str) and content:
        response.content = content
        decoded = True
    reasoning = message.get("reasoning_content") or message.get("reasoning")
    if isinstance(reasoning, str) and reasoning and not response.reasoning:
        response.reasoning = reasoning
        decoded = True
    calls = []
    for index, item in enumerate(message.get("tool_calls") or ()):
        fn = item.get("function") or {}
        calls.append(ToolCall.from_raw(item.get("id") or f"call_{index}", fn.get("name") or "", fn.get("arguments")))
    if calls and not response.tool_calls:
        response.tool_calls = calls
        decoded = True
    if choice.get("finish_reason") and not response.finish_reason:
        response.finish_reason = choice["finish_reason"]
    usage = raw.get("usage")
    if usage and not response.usage.total:
        response.usage = TokenUsage.from_mapping(usage)
    if raw.get("model") and not response.model:
        response.model = raw["model"]
    return decoded


class CompatibilityDecodeResponsePolicy(ResponsePolicy):
    """Decode raw provider payloads and parse structured output."""

    async def apply(self, context: PolicyContext) -> None:
        response = context.response
        if response is None or response.is_error or response.is_cancelled:
            return
        raw = _as_mapping(response.raw)
        if raw is not None and not response.content and not response.tool_calls:
            decode_chat_completion(response, raw)

        request = context.request
        if request.output_schema is None or response.tool_calls or response.structured is not None:
            return
        if not response.content.strip():
            context.diagnostics.add(
                MessageSeverity.WARNING,
                MessageOrigin.RETURN,
                "Structured output was requested but the response is empty",
                code=MessageCode.RETURN_INVALID,
            )
            return
        try:
            parsed = json.loads(strip_code_fence(response.content))
        except ValueError as exc:
            context.diagnostics.add(
                MessageSeverity.WARNING,
                MessageOrigin.RETURN,
                f"Structured output is not valid JSON: {exc}",
                code=MessageCode.RETURN_INVALID,
            )
            return
        envelope = request.extra.get(RESPONSE_SCHEMA_KEY) or {}
        wrapper = envelope.get("wrapper")
        if wrapper and isinstance(parsed, Mapping) and wrapper in parsed:
            parsed = parsed[wrapper]
        response.structured = parsed


__all__ = ["CompatibilityDecodeResponsePolicy", "decode_chat_completion", "strip_code_fence"]
