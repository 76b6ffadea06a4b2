"""
Helper utilities for the OpenAI Chat Completions adapter.

Purpose:
- Translate ``CallRequest`` values into Chat Completions parameters
  (messages, tools, ``response_format``).
- Wrap the SDK ``create`` call so failures surface as ``ProviderError`` with a
  normalized ``ErrorCode``.

Timeout strategy:
- The per-request timeout is forwarded to the SDK; the executor additionally
  races the whole call against its own timeout and the cancellation token.
"""

from __future__ import annotations

import asyncio
import json
import typing as _t

from ..base.errors import ErrorCode, ProviderError, classify_exception
from ..base.models import CallRequest, Message
from ..base.policies.request.schema_attach import RESPONSE_SCHEMA_KEY

RETRYABLE = (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE)


def to_openai_message(message: Message) -> dict:
    """Render one conversation message in Chat Completions wire shape."""
    data: dict = {"role": message.role, "content": message.content}
    if message.role == "tool":
        data["tool_call_id"] = message.tool_call_id or ""
    elif message.name:
        data["name"] = message.name
    if message.tool_calls:
        data["content"] = message.content or None
        data["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": call.name,
                    "arguments": call.raw_arguments or json.dumps(dict(call.arguments)),
                },
            }
            for call in message.tool_calls
        ]
    return data


def prepare_response_format(request: CallRequest) -> dict | None:
    """Translate the attached schema envelope into ``response_format``.

    Returns ``None`` when no schema is attached.
    """
    envelope = request.extra.get(RESPONSE_SCHEMA_KEY)
    if not envelope:
        return None
    return {
        "type": "json_schema",
        "json_schema": {
            "name": envelope.get("name") or "response",
            "schema": envelope.get("schema") or {},
            "strict": bool(envelope.get("strict", True)),
        },
    }


def build_chat_params(model: str, request: CallRequest, *, stream: bool = False) -> dict:
    """Assemble keyword arguments for ``client.chat.completions.create``.

    Recognized ``extra`` keys (``temperature``, ``max_tokens``, ``top_p``,
    ``seed``) are forwarded as-is.
    """
    params: dict = {"model": model, "messages": [to_openai_message(m) for m in request.messages]}
    for key in ("temperature", "max_tokens", "top_p", "seed"):
        if request.extra.get(key) is not None:
            params[key] = request.extra[key]
    response_format = prepare_response_format(request)
    if response_format:
        params["response_format"] = response_format
    if request.tools:
        params["tools"] = [spec.to_function() for spec in request.tools]
    if request.timeout_seconds:
        params["timeout"] = float(request.timeout_seconds)
    if stream:
        params["stream"] = True
        params["stream_options"] = {"include_usage": True}
    return params


async def invoke_create(client: _t.Any, params: dict, model: str, provider_name: str) -> _t.Any:
    """Await ``chat.completions.create`` with error classification.

    Raises:
        asyncio.TimeoutError: Re-raised so the executor's timeout handling applies.
        ProviderError: For every other failure, carrying the classified code.
    """
    try:
        return await client.chat.completions.create(**params)
    except (TimeoutError, asyncio.TimeoutError, asyncio.CancelledError):
        raise
    except ProviderError:
        raise
    except Exception as e:  # noqa: BLE001
        code = classify_exception(e)
        raise ProviderError(
            code=code,
            message=str(e),
            provider=provider_name,
            model=model,
            retryable=code in RETRYABLE,
            raw=e,
        ) from e


__all__ = [
    "build_chat_params",
    "invoke_create",
    "prepare_response_format",
    "to_openai_message",
]
