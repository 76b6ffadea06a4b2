"""Default response policies."""

from .compatibility_decode import CompatibilityDecodeResponsePolicy, decode_chat_completion, strip_code_fence
from .finish_reason import FINISH_REASON_MAP, FinishReasonNormalizePolicy, normalize_finish_reason
from .schema_validation import SchemaValidationResponsePolicy

__all__ = [
    "CompatibilityDecodeResponsePolicy",
    "FinishReasonNormalizePolicy",
    "SchemaValidationResponsePolicy",
    "FINISH_REASON_MAP",
    "decode_chat_completion",
    "normalize_finish_reason",
    "strip_code_fence",
]
