"""Unified provider error taxonomy public surface."""

from .errors_parts.classification import classify_exception, to_message_code, to_message_origin
from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError

__all__ = ["ErrorCode", "ProviderError", "classify_exception", "to_message_code", "to_message_origin"]
