"""Default request policies."""

from .context_injection import CONTEXT_HEADER, ContextInjectionRequestPolicy
from .model_resolution import ModelResolutionRequestPolicy
from .request_timeout import RequestTimeoutPolicy
from .schema_attach import RESPONSE_SCHEMA_KEY, SchemaAttachRequestPolicy, wrap_schema
from .tool_filter import ToolFilterRequestPolicy

__all__ = [
    "ContextInjectionRequestPolicy",
    "ModelResolutionRequestPolicy",
    "RequestTimeoutPolicy",
    "SchemaAttachRequestPolicy",
    "ToolFilterRequestPolicy",
    "RESPONSE_SCHEMA_KEY",
    "wrap_schema",
    "CONTEXT_HEADER",
]
