"""Call state machine, tool-call loop and orchestrator."""

from .call_state import TRANSITIONS, CallState, InvalidStatusTransition, StatusCallback
from .orchestrator import AICallOrchestrator, DeltaCallback
from .tool_call_loop import Dispatch, ToolCallLoop

__all__ = [
    "AICallOrchestrator",
    "CallState",
    "DeltaCallback",
    "Dispatch",
    "InvalidStatusTransition",
    "StatusCallback",
    "ToolCallLoop",
    "TRANSITIONS",
]
