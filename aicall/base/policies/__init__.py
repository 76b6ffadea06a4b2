"""Policy pipeline and the default request/response policies."""

from .pipeline import PolicyPipeline
from .policy_base import RequestPolicy, ResponsePolicy
from .policy_context import PolicyContext
from .request import (
    ContextInjectionRequestPolicy,
    ModelResolutionRequestPolicy,
    RequestTimeoutPolicy,
    SchemaAttachRequestPolicy,
    ToolFilterRequestPolicy,
    wrap_schema,
)
from .response import (
    CompatibilityDecodeResponsePolicy,
    FinishReasonNormalizePolicy,
    SchemaValidationResponsePolicy,
    normalize_finish_reason,
)

__all__ = [
    "PolicyPipeline",
    "PolicyContext",
    "RequestPolicy",
    "ResponsePolicy",
    "RequestTimeoutPolicy",
    "ToolFilterRequestPolicy",
    "ContextInjectionRequestPolicy",
    "ModelResolutionRequestPolicy",
    "SchemaAttachRequestPolicy",
    "CompatibilityDecodeResponsePolicy",
    "FinishReasonNormalizePolicy",
    "SchemaValidationResponsePolicy",
    "normalize_finish_reason",
    "wrap_schema",
]
