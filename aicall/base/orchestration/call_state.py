"""Per-call status tracking with an explicit transition table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from ..logging import LogContext, get_logger, log_event
from ..models import CallRequest, CallStatus, TokenUsage

StatusCallback = Callable[[CallStatus], Any]

_LOGGER = get_logger("aicall.orchestrator.state")

TRANSITIONS: Dict[CallStatus, FrozenSet[CallStatus]] = {
    CallStatus.IDLE: frozenset({CallStatus.PROCESSING, CallStatus.FINISHED}),
    CallStatus.PROCESSING: frozenset({CallStatus.STREAMING, CallStatus.CALLING_TOOLS, CallStatus.FINISHED}),
    CallStatus.STREAMING: frozenset({CallStatus.PROCESSING, CallStatus.CALLING_TOOLS, CallStatus.FINISHED}),
    CallStatus.CALLING_TOOLS: frozenset({CallStatus.PROCESSING, CallStatus.FINISHED}),
    CallStatus.FINISHED: frozenset(),
}


class InvalidStatusTransition(RuntimeError):
    """Raised for a status change the transition table does not allow."""

    def __init__(self, current: CallStatus, target: CallStatus) -> None:
        super().__init__(f"illegal status transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


@dataclass
class CallState:
    """Mutable state owned by one call.

    Attributes:
        on_status: Invoked with the new status after every transition.
        status: Current status.
        history: Every status entered, starting with ``IDLE``.
        request: The most recent request (after policies and tool rounds).
        usage: Token usage summed across turns.
        rounds: Tool rounds executed so far.
        partial_content: Text streamed in the current turn, kept for
            cancelled responses.
        streaming_noted: A streaming fallback diagnostic was already recorded.
    """

    on_status: Optional[StatusCallback] = None
    status: CallStatus = CallStatus.IDLE
    history: List[CallStatus] = field(default_factory=lambda: [CallStatus.IDLE])
    request: Optional[CallRequest] = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    rounds: int = 0
    partial_content: str = ""
    streaming_noted: bool = False

    def can_transition(self, target: CallStatus) -> bool:
        return target is self.status or target in TRANSITIONS[self.status]

    def transition(self, target: CallStatus) -> bool:
        """Move to ``target``; returns False when already there.

        Raises:
            InvalidStatusTransition: when the table forbids the change.
        """
        if target is self.status:
            return False
        if target not in TRANSITIONS[self.status]:
            raise InvalidStatusTransition(self.status, target)
        previous, self.status = self.status, target
        self.history.append(target)
        ctx = LogContext(request_id=self.request.request_id) if self.request is not None else None
        log_event(_LOGGER, "call.status", ctx, level=logging.DEBUG, status=target.value, previous=previous.value)
        if self.on_status is not None:
            self.on_status(target)
        return True


__all__ = ["CallState", "InvalidStatusTransition", "StatusCallback", "TRANSITIONS"]
