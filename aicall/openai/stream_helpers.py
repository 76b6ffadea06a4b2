"""Streaming translation for OpenAI-style Chat Completions chunks.

``OpenAIStreamingAdapter`` plugs into :class:`BaseStreamingAdapter`: it opens
the SDK stream, maps each ``ChatCompletionChunk`` (or an equivalent mapping)
to a :class:`ResponseDelta` and splits inline ``<think>...</think>`` spans
into the reasoning channel. Tags may be split across chunks.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from ..base.cancellation import CancellationToken
from ..base.logging import get_logger
from ..base.models import CallRequest, TokenUsage
from ..base.streaming import BaseStreamingAdapter, ResponseDelta, ToolCallFragment
from .style_helpers import build_chat_params, invoke_create

_OPEN = "<think>"
_CLOSE = "</think>"


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _partial_suffix(text: str, tag: str) -> int:
    """Length of the longest suffix of ``text`` that is a proper prefix of ``tag``."""
    for size in range(min(len(tag) - 1, len(text)), 0, -1):
        if text.endswith(tag[:size]):
            return size
    return 0


class ThinkTagSplitter:
    """Incrementally route text inside ``<think>`` tags to reasoning."""

    def __init__(self) -> None:
        self.in_think = False
        self._carry = ""

    def feed(self, text: str) -> Tuple[str, str]:
        """Return ``(content, reasoning)`` for ``text``; a partial tag is held back."""
        buf = self._carry + (text or "")
        self._carry = ""
        content, reasoning = [], []
        while buf:
            tag = _CLOSE if self.in_think else _OPEN
            target = reasoning if self.in_think else content
            idx = buf.find(tag)
            if idx >= 0:
                target.append(buf[:idx])
                buf = buf[idx + len(tag) :]
                self.in_think = not self.in_think
                continue
            keep = _partial_suffix(buf, tag)
            target.append(buf[: len(buf) - keep])
            self._carry = buf[len(buf) - keep :]
            break
        return "".join(content), "".join(reasoning)

    def flush(self) -> Tuple[str, str]:
        carry, self._carry = self._carry, ""
        return ("", carry) if self.in_think else (carry, "")


def translate_openai_chunk(chunk: Any, provider: str, model: str) -> Optional[ResponseDelta]:
    """Map one Chat Completions chunk; ``None`` when it carries nothing."""
    usage_raw = _get(chunk, "usage")
    usage = None
    if usage_raw is not None:
        usage = TokenUsage(
            int(_get(usage_raw, "prompt_tokens", 0) or 0),
            int(_get(usage_raw, "completion_tokens", 0) or 0),
        )
    choices = _get(chunk, "choices") or []
    if not choices:
        if usage is None:
            return None
        return ResponseDelta(provider=provider, model=model, usage=usage, raw=chunk)
    choice = choices[0]
    delta = _get(choice, "delta")
    fragments = []
    for item in _get(delta, "tool_calls") or ():
        fn = _get(item, "function")
        fragments.append(
            ToolCallFragment(
                index=int(_get(item, "index", 0) or 0),
                id=_get(item, "id"),
                name=_get(fn, "name"),
                arguments=_get(fn, "arguments") or "",
            )
        )
    return ResponseDelta(
        provider=provider,
        model=_get(chunk, "model") or model,
        content=_get(delta, "content") or "",
        reasoning=_get(delta, "reasoning_content") or _get(delta, "reasoning") or "",
        tool_calls=tuple(fragments),
        finish_reason=_get(choice, "finish_reason"),
        usage=usage,
        raw=chunk,
    )


class OpenAIStreamingAdapter(BaseStreamingAdapter):
    """Single-use streaming adapter over an ``AsyncOpenAI`` client."""

    def __init__(self, client: Any, *, provider_name: str = "openai", default_model: str = "") -> None:
        super().__init__(provider_name=provider_name, logger=get_logger(f"aicall.{provider_name}.stream"))
        self._client = client
        self._default_model = default_model
        self._splitter = ThinkTagSplitter()

    async def open_stream(self, request: CallRequest, cancellation: CancellationToken) -> Any:
        cancellation.raise_if_cancelled()
        model = request.model or self._default_model
        params = build_chat_params(model, request, stream=True)
        return await invoke_create(self._client, params, model, self.provider_name)

    def translate_chunk(self, chunk: Any, request: CallRequest) -> Optional[ResponseDelta]:
        return translate_openai_chunk(chunk, request.provider or self.provider_name, request.model or self._default_model)

    def normalize_delta(self, delta: ResponseDelta) -> Optional[ResponseDelta]:
        content, reasoning = self._splitter.feed(delta.content)
        if delta.finish_reason is not None:
            tail_content, tail_reasoning = self._splitter.flush()
            content, reasoning = content + tail_content, reasoning + tail_reasoning
        return ResponseDelta(
            provider=delta.provider,
            model=delta.model,
            content=content,
            reasoning=delta.reasoning + reasoning,
            tool_calls=delta.tool_calls,
            finish_reason=delta.finish_reason,
            usage=delta.usage,
            raw=delta.raw,
        )


__all__ = ["OpenAIStreamingAdapter", "ThinkTagSplitter", "translate_openai_chunk"]
