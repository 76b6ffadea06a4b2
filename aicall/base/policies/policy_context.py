"""Mutable context handed to every policy of one call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..cancellation import CancellationToken
from ..diagnostics import DiagnosticsSink
from ..models import CallRequest, CallResponse
from ..repositories import ModelCapabilityRegistry

if TYPE_CHECKING:
    from ...config.settings import OrchestrationSettings
    from ..registry import ContextRegistry, ProviderRegistry, ToolRegistry


@dataclass
class PolicyContext:
    """Call-scoped state shared by the policies of one pipeline run.

    Request policies replace ``request`` with derived requests; response
    policies update ``response`` in place. Registries are shared read-mostly
    components and may be ``None`` in narrow test setups.
    """

    request: CallRequest
    response: Optional[CallResponse] = None
    models: Optional[ModelCapabilityRegistry] = None
    tools: Optional["ToolRegistry"] = None
    providers: Optional["ProviderRegistry"] = None
    contexts: Optional["ContextRegistry"] = None
    settings: Optional["OrchestrationSettings"] = None
    cancellation: CancellationToken = field(default_factory=CancellationToken)

    @property
    def diagnostics(self) -> DiagnosticsSink:
        return self.request.diagnostics


__all__ = ["PolicyContext"]
