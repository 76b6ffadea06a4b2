"""One-class-per-file data model parts; import from ``aicall.base.models``."""

from .call_request import CallRequest
from .call_response import CallResponse, ResponseFinishedError
from .call_status import CallStatus
from .message import Message, Role
from .token_usage import TokenUsage
from .tool_call import ToolCall

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
