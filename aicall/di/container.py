"""Dependency injection container for the call pipeline.

Goals:
- Centralize construction of the shared registries, executor, policy
  pipeline and orchestrator.
- Decouple callers from direct factory calls; adapters are created through
  :class:`ProviderFactory` for every enabled provider.

Components are built lazily on first access and cached for the container's
lifetime. Tests may pass pre-built registries or providers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from ..base.executor import DefaultProviderExecutor
from ..base.factory import ProviderFactory, UnknownProviderError
from ..base.interfaces import AIProvider, ContextProvider
from ..base.logging import get_logger, log_event
from ..base.orchestration import AICallOrchestrator
from ..base.policies import PolicyPipeline
from ..base.registry import ContextRegistry, ProviderRegistry, ToolRegistry
from ..base.repositories import ModelCapabilityRegistry
from ..base.timeouts import TimeoutConfig, get_timeout_config
from ..base.tools import AITool
from ..config import get_settings
from ..config.settings import OrchestrationSettings


class AICallContainer:
    """Dependency injection container for orchestration services and singletons."""

    def __init__(
        self,
        settings: Optional[OrchestrationSettings] = None,
        *,
        providers: Optional[Iterable[AIProvider]] = None,
        tools: Optional[Iterable[AITool]] = None,
        contexts: Optional[Iterable[ContextProvider]] = None,
        timeouts: Optional[TimeoutConfig] = None,
    ) -> None:
        """Initialize the container.

        Args:
            settings: Orchestration settings; loaded from config when omitted.
            providers: Pre-built adapters registered instead of the enabled
                providers from settings.
            tools: Tools registered at construction.
            contexts: Context providers registered at construction.
            timeouts: Timeout configuration for the executor.
        """
        self.settings = settings if settings is not None else get_settings()
        self._given_providers = list(providers) if providers is not None else None
        self._given_tools = list(tools or ())
        self._given_contexts = list(contexts or ())
        self._timeouts = timeouts
        self._singletons: Dict[str, Any] = {}
        self._logger = get_logger("aicall.di")

    def _once(self, key: str, build) -> Any:
        if key not in self._singletons:
            self._singletons[key] = build()
        return self._singletons[key]

    # ---- registries ----
    def model_registry(self) -> ModelCapabilityRegistry:
        return self._once("models", ModelCapabilityRegistry)

    def provider_registry(self) -> ProviderRegistry:
        return self._once("providers", self._build_providers)

    def tool_registry(self) -> ToolRegistry:
        return self._once("tools", lambda: ToolRegistry(self._given_tools))

    def context_registry(self) -> ContextRegistry:
        return self._once("contexts", lambda: ContextRegistry(self._given_contexts))

    def _build_providers(self) -> ProviderRegistry:
        registry = ProviderRegistry(self.model_registry())
        disabled = set(self.settings.streaming_disabled_providers)
        if self._given_providers is not None:
            adapters = self._given_providers
        else:
            adapters = []
            for name in self.settings.enabled_providers:
                try:
                    adapters.append(ProviderFactory.create(name))
                except UnknownProviderError as exc:
                    log_event(self._logger, "provider.skipped", None, level=logging.WARNING, provider=name, error=str(exc))
        for adapter in adapters:
            registry.register(adapter, streaming_enabled=adapter.name.lower() not in disabled)
        return registry

    # ---- services ----
    def pipeline(self) -> PolicyPipeline:
        return self._once("pipeline", lambda: PolicyPipeline.default(self.settings))

    def executor(self) -> DefaultProviderExecutor:
        return self._once(
            "executor",
            lambda: DefaultProviderExecutor(
                self.provider_registry(), self.tool_registry(), self._timeouts or get_timeout_config()
            ),
        )

    def orchestrator(self) -> AICallOrchestrator:
        return self._once(
            "orchestrator",
            lambda: AICallOrchestrator(
                self.executor(),
                self.pipeline(),
                models=self.model_registry(),
                tools=self.tool_registry(),
                providers=self.provider_registry(),
                contexts=self.context_registry(),
                settings=self.settings,
            ),
        )

    def provider(self, name: str) -> Optional[AIProvider]:
        return self.provider_registry().get(name)

    def clear(self) -> None:
        """Drop every cached component (tests)."""
        self._singletons.clear()


def build_container(
    settings: Optional[OrchestrationSettings] = None,
    overrides: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> AICallContainer:
    """Construct a container; ``overrides`` are merged into loaded settings."""
    if settings is None:
        settings = get_settings(overrides)
    return AICallContainer(settings, **kwargs)


__all__ = ["AICallContainer", "build_container"]
