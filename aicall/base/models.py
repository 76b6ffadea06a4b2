"""
Provider-agnostic call/return data model public surface.

Re-exports the one-class-per-file implementations under
``aicall.base.models_parts``.
"""

from .models_parts.call_request import CallRequest
from .models_parts.call_response import CallResponse, ResponseFinishedError
from .models_parts.call_status import CallStatus
from .models_parts.message import Message, Role
from .models_parts.token_usage import TokenUsage
from .models_parts.tool_call import ToolCall

__all__ = [
    "CallRequest",
    "CallResponse",
    "CallStatus",
    "Message",
    "ResponseFinishedError",
    "Role",
    "TokenUsage",
    "ToolCall",
]
