"""Executable tool definition."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ..capabilities import Capability
from ..dto.tool_spec import ToolSpec

ToolHandler = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class AITool:
    """A tool the model may call.

    Attributes:
        name: Unique tool name.
        description: Summary shown to the model.
        parameters: JSON schema of the arguments object.
        handler: Callable receiving the parsed arguments dict. Plain functions
            run in a worker thread; coroutine functions are awaited.
        required_capabilities: Model capabilities the tool needs.
        timeout_seconds: Per-invocation limit (``None`` uses the executor default).
    """

    name: str
    handler: ToolHandler
    description: str = ""
    parameters: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    required_capabilities: Capability = Capability.FUNCTION_CALLING
    timeout_seconds: Optional[float] = None

    @property
    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
            required_capabilities=int(self.required_capabilities),
        )

    @property
    def is_async(self) -> bool:
        target = getattr(self.handler, "__call__", self.handler)
        return inspect.iscoroutinefunction(self.handler) or inspect.iscoroutinefunction(target)


__all__ = ["AITool", "ToolHandler"]
