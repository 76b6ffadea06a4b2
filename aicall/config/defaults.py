"""aicall.config.defaults
=====================

Small, stable default values used across the ``aicall`` package. They can be
overridden through the external config file, environment variables or
in-code overrides (see :mod:`aicall.config`).

This module imports nothing from the rest of the package so any layer,
``aicall.base`` included, can depend on it without import cycles.
"""

from __future__ import annotations

# ---- Request timeouts (seconds) ----
DEFAULT_TIMEOUT_SECONDS = 120
MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 600

# ---- Tool execution ----
# Tool rounds allowed per call before the loop gives up.
DEFAULT_MAX_TOOL_ROUNDS = 8
# Run the tool calls of one round concurrently.
DEFAULT_CONCURRENT_TOOL_EXECUTION = True
# Wall-clock limit for a single tool invocation.
DEFAULT_TOOL_TIMEOUT_SECONDS = 60.0

# ---- Streaming ----
DEFAULT_COALESCE_TOKENS = True
DEFAULT_COALESCE_DELAY_MS = 40
DEFAULT_PREFERRED_CHUNK_SIZE = 24
DEFAULT_MAX_BUFFERED_DELTAS = 64
DEFAULT_STREAM_IDLE_TIMEOUT_SECONDS = 60.0

# ---- Model selection ----
# Accept a model name the registry does not know (sent to the provider as-is).
DEFAULT_ALLOW_UNREGISTERED_MODELS = False

# ---- Caller-level retry ----
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_BASE = 2.0
DEFAULT_RETRY_INITIAL_DELAY = 0.5

# ---- Provider-specific defaults ----
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
MOCK_DEFAULT_MODEL = "mock-chat"

# Providers enabled by the DI container when none are configured.
DEFAULT_ENABLED_PROVIDERS = ("mock", "openai")
