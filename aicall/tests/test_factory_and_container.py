"""Provider factory and dependency injection wiring."""
from __future__ import annotations

import json
import logging

import pytest

import aicall
from aicall.base.errors import ErrorCode, ProviderError
from aicall.base.factory import ProviderFactory, UnknownProviderError, create_provider
from aicall.base.logging import get_logger
from aicall.config.settings import OrchestrationSettings
from aicall.di import AICallContainer, build_container
from aicall.mock import MockProvider
from aicall.openai import OpenAIProvider
from aicall.tests.utils import user_request


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - exercised via tests
        self.messages.append(record.getMessage())


def test_factory_unknown_provider():
    with pytest.raises(UnknownProviderError):
        ProviderFactory.create("nope")


def test_factory_import_failure(monkeypatch):
    monkeypatch.setattr(
        ProviderFactory,
        "_PROVIDERS",
        {"bogus": {"module": "does.not.exist", "class": "X"}},
        raising=False,
    )
    with pytest.raises(UnknownProviderError):
        ProviderFactory.create("bogus")


def test_factory_missing_class_and_bad_arguments(monkeypatch):
    monkeypatch.setattr(
        ProviderFactory,
        "_PROVIDERS",
        {"ghost": {"module": "aicall.mock.client", "class": "GhostProvider"}, **ProviderFactory._PROVIDERS},
        raising=False,
    )
    with pytest.raises(UnknownProviderError, match="not found"):
        ProviderFactory.create("ghost")
    with pytest.raises(UnknownProviderError, match="Invalid arguments"):
        ProviderFactory.create("mock", colour="blue")


def test_factory_creates_known_providers():
    assert ProviderFactory.supported() == ("mock", "openai")  # nosec B101
    assert isinstance(create_provider(" Mock "), MockProvider)  # nosec B101
    assert isinstance(ProviderFactory.create("openai"), OpenAIProvider)  # nosec B101


def test_top_level_create_wraps_failures():
    assert isinstance(aicall.create("mock", chunk_size=4), MockProvider)  # nosec B101
    with pytest.raises(ProviderError) as info:
        aicall.create("nope")
    assert info.value.code is ErrorCode.UNKNOWN and "nope" in info.value.message  # nosec B101


def test_container_builds_enabled_providers_and_caches_components():
    container = AICallContainer(OrchestrationSettings(enabled_providers=("mock", "openai")))
    assert container.orchestrator() is container.orchestrator()  # nosec B101
    assert container.executor().providers is container.provider_registry()  # nosec B101
    assert container.provider_registry().models is container.model_registry()  # nosec B101
    assert isinstance(container.provider("mock"), MockProvider)  # nosec B101
    assert isinstance(container.provider("openai"), OpenAIProvider)  # nosec B101

    first = container.orchestrator()
    container.clear()
    assert container.orchestrator() is not first  # nosec B101


def test_container_skips_unknown_providers_with_a_warning():
    logger = get_logger("aicall.di")
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        container = AICallContainer(OrchestrationSettings(enabled_providers=("mock", "nope")))
        registry = container.provider_registry()
    finally:
        logger.removeHandler(handler)
    assert registry.get("mock") is not None and registry.get("nope") is None  # nosec B101
    payload = json.loads(handler.messages[-1])
    assert payload["event"] == "provider.skipped" and payload["provider"] == "nope"  # nosec B101


def test_container_marks_streaming_disabled_providers():
    settings = OrchestrationSettings(enabled_providers=("mock",), streaming_disabled_providers=("mock",))
    registration = AICallContainer(settings).provider_registry().registration("mock")
    assert registration.streaming_supported and not registration.streaming_enabled  # nosec B101


@pytest.mark.asyncio
async def test_build_container_applies_overrides():
    container = build_container(overrides={"enabled_providers": ["mock"], "max_tool_rounds": 2})
    assert container.settings.max_tool_rounds == 2  # nosec B101
    response = await container.orchestrator().run(user_request("hello"))
    assert response.content == "Hello from the mock provider."  # nosec B101
