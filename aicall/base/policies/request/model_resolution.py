"""Provider and model selection."""

from __future__ import annotations

from typing import Optional

from ....config.defaults import DEFAULT_ALLOW_UNREGISTERED_MODELS
from ...capabilities import Capability, missing_capabilities, to_detailed_string
from ...diagnostics import MessageCode, MessageOrigin, MessageSeverity
from ..policy_base import RequestPolicy
from ..policy_context import PolicyContext


class ModelResolutionRequestPolicy(RequestPolicy):
    """Validate the provider and resolve the model for the request's capabilities.

    Outcomes (recorded in the diagnostics sink):

    * no provider: ERROR ``PROVIDER_MISSING``
    * provider not registered: ERROR ``UNKNOWN_PROVIDER``
    * no model: the provider's configured model when registered and capable,
      otherwise the registry default for the required capabilities, or ERROR
      ``NO_CAPABLE_MODEL``
    * unregistered model: ERROR ``UNKNOWN_MODEL`` (INFO and pass-through when
      ``allow_unregistered_models``)
    * registered model lacking capabilities: replaced by the default with an
      INFO ``CAPABILITY_MISMATCH``, or ERROR ``CAPABILITY_MISMATCH`` when no
      model qualifies
    """

    def __init__(self, *, allow_unregistered_models: bool = DEFAULT_ALLOW_UNREGISTERED_MODELS) -> None:
        self.allow_unregistered_models = allow_unregistered_models

    async def apply(self, context: PolicyContext) -> None:
        request = context.request
        sink = context.diagnostics
        provider = request.provider
        if not provider:
            sink.add(
                MessageSeverity.ERROR,
                MessageOrigin.REQUEST,
                "No provider was specified for the request",
                code=MessageCode.PROVIDER_MISSING,
            )
            return
        if context.providers is not None and provider not in context.providers:
            sink.add(
                MessageSeverity.ERROR,
                MessageOrigin.REQUEST,
                f"Unknown provider '{provider}'",
                code=MessageCode.UNKNOWN_PROVIDER,
            )
            return
        models = context.models
        if models is None:
            return

        required = request.capability
        if not request.model:
            resolved = self._default_model(context, provider, required)
            if resolved is None:
                sink.add(
                    MessageSeverity.ERROR,
                    MessageOrigin.REQUEST,
                    f"No model on provider '{provider}' supports the required capabilities "
                    f"({to_detailed_string(required)})",
                    code=MessageCode.NO_CAPABLE_MODEL,
                )
                return
            sink.add(
                MessageSeverity.INFO,
                MessageOrigin.REQUEST,
                f"Model not specified; using default model '{resolved}'",
                surfaceable=False,
            )
            context.request = request.with_model(resolved)
            return

        entry = models.get(provider, request.model)
        if entry is None:
            if self.allow_unregistered_models:
                sink.add(
                    MessageSeverity.INFO,
                    MessageOrigin.REQUEST,
                    f"Model '{request.model}' is not registered for provider '{provider}'; sending as-is",
                    code=MessageCode.UNKNOWN_MODEL,
                )
            else:
                sink.add(
                    MessageSeverity.ERROR,
                    MessageOrigin.REQUEST,
                    f"Unknown model '{request.model}' for provider '{provider}'",
                    code=MessageCode.UNKNOWN_MODEL,
                )
            return

        if entry.supports(required):
            return
        lacking = to_detailed_string(missing_capabilities(entry.capabilities, required))
        replacement = self._default_model(context, provider, required)
        if replacement is None:
            sink.add(
                MessageSeverity.ERROR,
                MessageOrigin.REQUEST,
                f"Model '{request.model}' on provider '{provider}' does not support required capabilities "
                f"({lacking}) and no capable replacement exists",
                code=MessageCode.CAPABILITY_MISMATCH,
            )
            return
        sink.add(
            MessageSeverity.INFO,
            MessageOrigin.REQUEST,
            f"Model '{request.model}' lacks required capabilities ({lacking}); using '{replacement}' instead",
            code=MessageCode.CAPABILITY_MISMATCH,
        )
        context.request = request.with_model(replacement)

    @staticmethod
    def _default_model(context: PolicyContext, provider: str, required: Capability) -> Optional[str]:
        """The provider's own configured model when registered and capable, else the registry default."""
        models = context.models
        instance = context.providers.get(provider) if context.providers is not None else None
        configured = getattr(instance, "default_model", None)
        if callable(configured):
            name = configured()
            entry = models.get(provider, name) if name else None
            if entry is not None and entry.supports(required):
                return name
        return models.default_for(provider, required)


__all__ = ["ModelResolutionRequestPolicy"]
