"""Pytest configuration for the aicall test suite.

Every test starts from a clean configuration: no external config file, no
``AICALL_*`` overrides and a fresh config cache. Fixtures build orchestrators
around the deterministic mock provider so no network access is needed.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator

import pytest

from aicall.base.tools import AITool
from aicall.config import reset_config_cache
from aicall.config.settings import ENV_SETTINGS, OrchestrationSettings
from aicall.di import AICallContainer
from aicall.mock import MockProvider

WEATHER_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {"city": {"type": "string"}},
    "required": ["city"],
}


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from the developer's environment and config file."""

    monkeypatch.delenv("AICALL_CONFIG_FILE", raising=False)
    for var in ENV_SETTINGS:
        monkeypatch.delenv(var, raising=False)
    for var in ("OPENAI_API_KEY", "AICALL_OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL"):
        monkeypatch.delenv(var, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def mock_provider() -> MockProvider:
    """``MockProvider`` configured for the bundled fixture catalog."""

    return MockProvider()


@pytest.fixture()
def weather_calls() -> list:
    return []


@pytest.fixture()
def weather_tool(weather_calls: list) -> AITool:
    """Synchronous tool answering the mock's weather prompt."""

    def _handler(args: Dict[str, Any]) -> Dict[str, Any]:
        weather_calls.append(args)
        return {"city": args["city"], "forecast": "sunny"}

    return AITool(
        name="get_weather",
        handler=_handler,
        description="Current weather for a city",
        parameters=WEATHER_PARAMETERS,
    )


@pytest.fixture()
def settings() -> OrchestrationSettings:
    return OrchestrationSettings(enabled_providers=("mock",))


@pytest.fixture()
def container(settings: OrchestrationSettings, mock_provider: MockProvider, weather_tool: AITool) -> AICallContainer:
    """Container wired with the mock provider and the weather tool."""

    return AICallContainer(settings, providers=[mock_provider], tools=[weather_tool])


@pytest.fixture()
def orchestrator(container: AICallContainer):
    return container.orchestrator()
