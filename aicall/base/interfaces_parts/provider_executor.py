"""ProviderExecutor Protocol (single-class module)."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..cancellation import CancellationToken
from ..models import CallRequest, CallResponse, ToolCall
from ..streaming import BaseStreamingAdapter


@runtime_checkable
class ProviderExecutor(Protocol):
    """Dispatch seam between the orchestrator and providers/tools.

    Both ``exec_*`` methods return ``None`` for a ``None`` input, raise
    ``CancelledError`` when the token fires, and report every other failure
    as a response with ``finish_reason == "error"``.
    """

    async def exec_provider(
        self, request: Optional[CallRequest], cancellation: CancellationToken
    ) -> Optional[CallResponse]:
        ...

    async def exec_tool(
        self,
        tool_call: Optional[ToolCall],
        cancellation: CancellationToken,
        *,
        request: Optional[CallRequest] = None,
    ) -> Optional[CallResponse]:
        ...

    def try_get_streaming_adapter(self, request: CallRequest) -> Optional[BaseStreamingAdapter]:
        ...


__all__ = ["ProviderExecutor"]
