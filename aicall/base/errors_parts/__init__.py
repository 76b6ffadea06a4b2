"""Errors parts package.

Prefer importing from ``aicall.base.errors`` for the stable surface.
"""

from .classification import classify_exception, to_message_code, to_message_origin
from .error_code import ErrorCode
from .provider_error import ProviderError

__all__ = ["ErrorCode", "ProviderError", "classify_exception", "to_message_code", "to_message_origin"]
