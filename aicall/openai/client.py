"""OpenAI provider adapter built on the ``openai`` SDK's ``AsyncOpenAI`` client.

The adapter is deliberately thin: ``call`` forwards the request to Chat
Completions and returns the completion as ``raw``; the response policy
pipeline decodes content, tool calls, usage and structured output from it.
Streaming goes through :class:`OpenAIStreamingAdapter`.

Configuration comes from :func:`aicall.config.get_provider_config` (defaults,
config file, ``OPENAI_*`` environment variables, overrides). A missing API key
fails the call with ``ErrorCode.AUTH`` instead of raising at construction so
the provider can still be registered and listed.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import openai

from ..base.cancellation import CancellationToken
from ..base.capabilities import Capability, parse_capability
from ..base.errors import ErrorCode, ProviderError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import CallRequest, CallResponse
from ..base.repositories import ModelEntry
from ..config import get_provider_config
from ..config.defaults import OPENAI_DEFAULT_MODEL
from .stream_helpers import OpenAIStreamingAdapter
from .style_helpers import build_chat_params, invoke_create

__all__ = ["OpenAIProvider", "DEFAULT_MODEL_CAPABILITIES"]

DEFAULT_MODEL_CAPABILITIES = Capability.TOOL_CHAT | Capability.JSON_OUTPUT | Capability.STREAMING | Capability.IMAGE_INPUT


class OpenAIProvider:
    """Chat Completions adapter implementing ``AIProvider`` and ``SupportsStreaming``."""

    def __init__(
        self,
        *,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Any = None,
        models: Optional[Sequence[Mapping[str, Any]]] = None,
        provider: str = "openai",
        streaming: bool = True,
    ) -> None:
        """
        Args:
            model: Default model; falls back to configuration.
            api_key: API key; falls back to ``OPENAI_API_KEY``.
            base_url: Endpoint for OpenAI-compatible servers.
            client: Pre-built async client (tests, custom transports).
            models: Declared models as ``{"name", "capabilities", "default"}``
                mappings; falls back to the ``models`` config entry, then to
                the default model alone.
            provider: Canonical id this instance registers as.
            streaming: Offer the streaming adapter.
        """
        self._provider = provider.lower()
        cfg = get_provider_config(self._provider, {"model": model, "api_key": api_key, "base_url": base_url})
        self._model = cfg.get("model") or OPENAI_DEFAULT_MODEL
        self._api_key = cfg.get("api_key")
        self._base_url = cfg.get("base_url")
        self._declared = list(models if models is not None else cfg.get("models") or ())
        self._client = client
        self._streaming = streaming
        self._logger = get_logger(f"aicall.{self._provider}")

    @property
    def name(self) -> str:
        return self._provider

    def default_model(self) -> str:
        return self._model

    def models(self) -> Sequence[ModelEntry]:
        entries = []
        names = set()
        for order, item in enumerate(self._declared):
            name = str(item["name"])
            names.add(name.lower())
            entries.append(
                ModelEntry(
                    provider=self._provider,
                    name=name,
                    capabilities=parse_capability(item.get("capabilities")) or Capability.BASIC_CHAT,
                    default=parse_capability(item.get("default")),
                    order=order,
                )
            )
        if self._model.lower() not in names:
            entries.insert(
                0,
                ModelEntry(
                    provider=self._provider,
                    name=self._model,
                    capabilities=DEFAULT_MODEL_CAPABILITIES,
                    default=Capability.TOOL_CHAT | Capability.JSON_OUTPUT,
                    order=-1,
                ),
            )
        return tuple(entries)

    # ---- client --------------------------------------------------------------

    def _make_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ProviderError(
                    code=ErrorCode.AUTH,
                    message=f"No API key configured for provider '{self._provider}'",
                    provider=self._provider,
                    model=self._model,
                )
            self._client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    # ---- AIProvider ----------------------------------------------------------

    async def call(self, request: CallRequest, cancellation: CancellationToken) -> CallResponse:
        model = request.model or self._model
        ctx = LogContext(provider=self._provider, model=model, request_id=request.request_id)
        client = self._make_client()
        cancellation.raise_if_cancelled()
        params = build_chat_params(model, request)
        normalized_log_event(
            self._logger,
            "openai.call.start",
            ctx,
            phase="start",
            emitted=False,
            tools=len(params.get("tools", ())),
            structured_output="response_format" in params,
        )
        completion = await invoke_create(client, params, model, self._provider)
        dump = getattr(completion, "model_dump", None)
        raw = dump() if callable(dump) else completion
        normalized_log_event(self._logger, "openai.call.end", ctx, phase="finalize", emitted=True)
        return CallResponse(provider=self._provider, model=model, raw=raw)

    # ---- SupportsStreaming -----------------------------------------------------

    def supports_streaming(self) -> bool:
        return self._streaming and (self._client is not None or bool(self._api_key))

    def streaming_adapter(self) -> OpenAIStreamingAdapter:
        return OpenAIStreamingAdapter(self._make_client(), provider_name=self._provider, default_model=self._model)
