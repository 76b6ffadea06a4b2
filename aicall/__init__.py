"""aicall package

Provider-agnostic orchestration of AI calls.

Purpose:
    Run a chat-style request against a registered provider through an
    ordered policy pipeline, with bounded tool-call rounds, coalesced
    streaming, cooperative cancellation and structured diagnostics.

Public API (re-exported):
    - Version: ``__version__``
    - DTOs: :class:`CallRequest`, :class:`CallResponse`, :class:`Message`
    - Orchestration: :class:`AICallOrchestrator`, :func:`build_container`
    - Errors: :class:`ProviderError`, :class:`ErrorCode`
    - Factory: :func:`create`

Typical use::

    container = build_container()
    response = await container.orchestrator().run(
        CallRequest(provider="mock", messages=(Message.user("hello"),))
    )
"""

from typing import Any

from .base import (
    AICallOrchestrator,
    AITool,
    CallRequest,
    CallResponse,
    CallStatus,
    CancellationToken,
    Capability,
    DiagnosticsSink,
    ErrorCode,
    Message,
    MessageCode,
    MessageSeverity,
    ProviderError,
    ProviderFactory,
    ResponseDelta,
    StreamingOptions,
    ToolCall,
    ToolSpec,
    call_with_retry,
)
from .config import get_settings
from .config.settings import OrchestrationSettings
from .di import AICallContainer, build_container

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AICallContainer",
    "AICallOrchestrator",
    "AITool",
    "CallRequest",
    "CallResponse",
    "CallStatus",
    "CancellationToken",
    "Capability",
    "DiagnosticsSink",
    "ErrorCode",
    "Message",
    "MessageCode",
    "MessageSeverity",
    "OrchestrationSettings",
    "ProviderError",
    "ProviderFactory",
    "ResponseDelta",
    "StreamingOptions",
    "ToolCall",
    "ToolSpec",
    "build_container",
    "call_with_retry",
    "create",
    "get_settings",
]


def create(provider_name: str, **kwargs: Any) -> Any:
    """Instantiate a provider adapter via :class:`ProviderFactory`.

    Raises:
        ProviderError: when the adapter cannot be created.
    """
    try:
        return ProviderFactory.create(provider_name, **kwargs)
    except Exception as e:
        raise ProviderError(
            code=ErrorCode.UNKNOWN,
            message=f"Failed to create provider '{provider_name}': {e}",
            provider=provider_name,
        ) from e
