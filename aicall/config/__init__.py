"""Layered configuration for providers and orchestration.

Merge order (later wins):
    1. Built-in defaults (:mod:`aicall.config.defaults`)
    2. Optional external config file (JSON or YAML) pointed to by
       ``AICALL_CONFIG_FILE``
    3. Environment variables
    4. In-code overrides

Environment variable conventions
--------------------------------
Providers: ``<PROVIDER>_MODEL``, ``<PROVIDER>_API_KEY``, ``<PROVIDER>_BASE_URL``
(e.g. ``OPENAI_MODEL``). Orchestration: ``AICALL_<SETTING>`` (e.g.
``AICALL_MAX_TOOL_ROUNDS``), see :mod:`aicall.config.settings`.

External config file example::

    openai:
      model: gpt-4o-mini
    mock:
      model: mock-chat
    orchestration:
      max_tool_rounds: 4
      streaming:
        coalesce_delay_ms: 25

This package does not import :mod:`aicall.base`; ``get_settings`` is resolved
lazily because the settings model embeds the streaming options.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

import yaml

from .defaults import MOCK_DEFAULT_MODEL, OPENAI_DEFAULT_BASE_URL, OPENAI_DEFAULT_MODEL
from .env import is_placeholder, resolve_provider_key

if TYPE_CHECKING:
    from .settings import OrchestrationSettings

CONFIG_FILE_ENV = "AICALL_CONFIG_FILE"

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {"model": OPENAI_DEFAULT_MODEL, "base_url": OPENAI_DEFAULT_BASE_URL},
    "mock": {"model": MOCK_DEFAULT_MODEL},
}

ENV_FIELD_MAP = {
    "model": "MODEL",
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_FILE_CACHE_PATH: Optional[str] = None


def _load_external_config() -> Dict[str, Any]:
    """Parse the file named by ``AICALL_CONFIG_FILE`` (cached per path).

    JSON is tried first, then YAML. A missing file yields ``{}``; a file that
    parses as neither raises ``ValueError``.
    """
    global _FILE_CACHE, _FILE_CACHE_PATH  # noqa: PLW0603 - module cache
    path = os.getenv(CONFIG_FILE_ENV) or ""
    if _FILE_CACHE is not None and path == _FILE_CACHE_PATH:
        return _FILE_CACHE
    data: Any = {}
    if path and Path(path).is_file():
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except ValueError:
            try:
                data = yaml.safe_load(text) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"config file '{path}' is neither valid JSON nor YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"config file '{path}' must contain a mapping at the top level")
    _FILE_CACHE, _FILE_CACHE_PATH = data, path
    return data


def reset_config_cache() -> None:
    """Forget the parsed config file (tests and long-lived processes)."""
    global _FILE_CACHE, _FILE_CACHE_PATH  # noqa: PLW0603 - module cache
    _FILE_CACHE, _FILE_CACHE_PATH = None, None


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None and not is_placeholder(val):
            out[field] = val
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for ``provider``.

    Merge order (later wins): defaults -> external file -> env vars ->
    credential aliases (only when no key is set yet) -> overrides.
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}
    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if not cfg.get("api_key"):
        key, _ = resolve_provider_key(name)
        if key:
            cfg["api_key"] = key

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


def get_settings(overrides: Optional[Dict[str, Any]] = None) -> "OrchestrationSettings":
    """Build :class:`OrchestrationSettings` from file, env and ``overrides``."""
    from .settings import load_settings

    return load_settings(_load_external_config().get("orchestration"), overrides)


__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULTS",
    "ENV_FIELD_MAP",
    "get_model",
    "get_provider_config",
    "get_settings",
    "reset_config_cache",
]
