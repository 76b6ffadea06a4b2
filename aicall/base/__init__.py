"""
aicall.base

Provider-agnostic core of the call pipeline:

- Diagnostics and capabilities: structured messages and model capability flags
- Models (DTOs): requests, responses, messages, tool calls
- Registries: models, providers and tools as explicit components
- Policies: ordered request/response transformations
- Executor, streaming and orchestration: dispatch, incremental delivery,
  tool rounds and the call state machine
- Factory: lazy creation of provider adapters by canonical id

Nothing in this package imports a concrete provider adapter.
"""

from .cancellation import CancellationToken, CancelledError
from .capabilities import Capability, has_capability, parse_capability, to_detailed_string
from .diagnostics import (
    DiagnosticsSealedError,
    DiagnosticsSink,
    MessageCode,
    MessageOrigin,
    MessageSeverity,
    RuntimeMessage,
    new_message,
    render_message,
)
from .dto import ToolResult, ToolSpec
from .errors import ErrorCode, ProviderError, classify_exception
from .executor import DefaultProviderExecutor
from .factory import ProviderFactory, UnknownProviderError
from .interfaces import AIProvider, ContextProvider, ProviderExecutor, SupportsStreaming
from .models import (
    CallRequest,
    CallResponse,
    CallStatus,
    Message,
    ResponseFinishedError,
    TokenUsage,
    ToolCall,
)
from .orchestration import AICallOrchestrator, CallState, InvalidStatusTransition, ToolCallLoop
from .policies import PolicyContext, PolicyPipeline, RequestPolicy, ResponsePolicy
from .registry import ContextRegistry, ProviderRegistration, ProviderRegistry, ToolRegistry
from .repositories import ModelCapabilityRegistry, ModelEntry
from .resilience import RetryConfig, call_with_retry
from .streaming import (
    BaseStreamingAdapter,
    ResponseDelta,
    StreamingOptions,
    StreamMetrics,
    ToolCallFragment,
    accumulate_deltas,
)
from .timeouts import TimeoutConfig, get_timeout_config
from .tools import AITool, ToolFilter

__all__ = [
    # Diagnostics & capabilities
    "Capability",
    "DiagnosticsSealedError",
    "DiagnosticsSink",
    "MessageCode",
    "MessageOrigin",
    "MessageSeverity",
    "RuntimeMessage",
    "has_capability",
    "new_message",
    "parse_capability",
    "render_message",
    "to_detailed_string",
    # Models
    "CallRequest",
    "CallResponse",
    "CallStatus",
    "Message",
    "ResponseFinishedError",
    "TokenUsage",
    "ToolCall",
    "ToolResult",
    "ToolSpec",
    # Contracts & registries
    "AIProvider",
    "ContextProvider",
    "ContextRegistry",
    "ModelCapabilityRegistry",
    "ModelEntry",
    "ProviderExecutor",
    "ProviderRegistration",
    "ProviderRegistry",
    "SupportsStreaming",
    "ToolRegistry",
    "AITool",
    "ToolFilter",
    # Pipeline & execution
    "AICallOrchestrator",
    "CallState",
    "DefaultProviderExecutor",
    "InvalidStatusTransition",
    "PolicyContext",
    "PolicyPipeline",
    "RequestPolicy",
    "ResponsePolicy",
    "ToolCallLoop",
    # Streaming
    "BaseStreamingAdapter",
    "ResponseDelta",
    "StreamMetrics",
    "StreamingOptions",
    "ToolCallFragment",
    "accumulate_deltas",
    # Errors, cancellation, timeouts, retry
    "CancellationToken",
    "CancelledError",
    "ErrorCode",
    "ProviderError",
    "RetryConfig",
    "TimeoutConfig",
    "call_with_retry",
    "classify_exception",
    "get_timeout_config",
    # Factory
    "ProviderFactory",
    "UnknownProviderError",
]
