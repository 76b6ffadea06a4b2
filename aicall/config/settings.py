"""Orchestration settings.

``OrchestrationSettings`` groups the knobs of the orchestrator, the policy
pipeline and the streaming path. ``load_settings`` merges, later wins:

1. field defaults (from :mod:`aicall.config.defaults`)
2. the ``orchestration`` section of the external config file
3. ``AICALL_*`` environment variables (see ``ENV_SETTINGS``)
4. in-code overrides

Invalid values raise ``pydantic.ValidationError``.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..base.streaming.streaming_options import StreamingOptions
from .defaults import (
    DEFAULT_ALLOW_UNREGISTERED_MODELS,
    DEFAULT_CONCURRENT_TOOL_EXECUTION,
    DEFAULT_ENABLED_PROVIDERS,
    DEFAULT_MAX_TOOL_ROUNDS,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
)

# env var -> (settings field, nested streaming field or None)
ENV_SETTINGS: Dict[str, Tuple[str, Optional[str]]] = {
    "AICALL_MAX_TOOL_ROUNDS": ("max_tool_rounds", None),
    "AICALL_CONCURRENT_TOOL_EXECUTION": ("concurrent_tool_execution", None),
    "AICALL_ALLOW_UNREGISTERED_MODELS": ("allow_unregistered_models", None),
    "AICALL_DEFAULT_TIMEOUT_SECONDS": ("default_timeout_seconds", None),
    "AICALL_STREAMING_DISABLED_PROVIDERS": ("streaming_disabled_providers", None),
    "AICALL_ENABLED_PROVIDERS": ("enabled_providers", None),
    "AICALL_STREAM_COALESCE_TOKENS": ("streaming", "coalesce_tokens"),
    "AICALL_STREAM_COALESCE_DELAY_MS": ("streaming", "coalesce_delay_ms"),
    "AICALL_STREAM_PREFERRED_CHUNK_SIZE": ("streaming", "preferred_chunk_size"),
    "AICALL_STREAM_MAX_BUFFERED_DELTAS": ("streaming", "max_buffered_deltas"),
}


class OrchestrationSettings(BaseModel):
    """Settings shared by every call of one orchestrator.

    Attributes:
        max_tool_rounds: Tool rounds allowed per call.
        concurrent_tool_execution: Run the calls of one round concurrently.
        allow_unregistered_models: Send unknown model names to the provider
            as-is instead of failing the call.
        default_timeout_seconds: Timeout applied when a request has none.
        streaming: Coalescing and buffering options.
        streaming_disabled_providers: Providers that always use the
            non-streaming path.
        enabled_providers: Providers the DI container registers.
    """

    model_config = ConfigDict(frozen=True)

    max_tool_rounds: int = Field(default=DEFAULT_MAX_TOOL_ROUNDS, ge=0)
    concurrent_tool_execution: bool = DEFAULT_CONCURRENT_TOOL_EXECUTION
    allow_unregistered_models: bool = DEFAULT_ALLOW_UNREGISTERED_MODELS
    default_timeout_seconds: int = Field(default=DEFAULT_TIMEOUT_SECONDS, ge=MIN_TIMEOUT_SECONDS, le=MAX_TIMEOUT_SECONDS)
    streaming: StreamingOptions = Field(default_factory=StreamingOptions)
    streaming_disabled_providers: Tuple[str, ...] = ()
    enabled_providers: Tuple[str, ...] = DEFAULT_ENABLED_PROVIDERS

    @field_validator("streaming_disabled_providers", "enabled_providers", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [p for p in value.replace(",", " ").split() if p]
        if isinstance(value, (list, tuple)):
            return tuple(str(p).strip().lower() for p in value if str(p).strip())
        return value


def _deep_merge(base: Dict[str, Any], extra: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in extra.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def _env_settings() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for var, (field, nested) in ENV_SETTINGS.items():
        raw = os.getenv(var)
        if raw is None or not raw.strip():
            continue
        if nested is None:
            out[field] = raw.strip()
        else:
            out.setdefault(field, {})[nested] = raw.strip()
    return out


def load_settings(
    file_section: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> OrchestrationSettings:
    """Merge file, environment and overrides into validated settings."""
    data: Dict[str, Any] = {}
    if isinstance(file_section, Mapping):
        data = _deep_merge(data, file_section)
    data = _deep_merge(data, _env_settings())
    if overrides:
        data = _deep_merge(data, overrides)
    return OrchestrationSettings.model_validate(data)


__all__ = ["OrchestrationSettings", "load_settings", "ENV_SETTINGS"]
