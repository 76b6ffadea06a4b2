"""Tool registry with filter-based selection."""

from __future__ import annotations

from threading import Lock
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from ..dto.tool_spec import ToolSpec
from ..logging import get_logger
from ..tools import AITool, ToolFilter


class ToolRegistry:
    """Thread-safe registry of executable tools.

    Same concurrency model as :class:`ProviderRegistry`: copy-on-write
    snapshots behind a write lock. Tools keep their registration order.
    """

    def __init__(self, tools: Optional[Iterable[AITool]] = None) -> None:
        self._lock = Lock()
        self._snapshot: Mapping[str, AITool] = MappingProxyType({})
        self.logger = get_logger("aicall.registry.tools")
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: AITool, *, replace: bool = False) -> AITool:
        """Add ``tool``.

        Raises:
            ValueError: if a tool with the same name exists and ``replace`` is false.
        """
        if not tool.name.strip():
            raise ValueError("tool name must be non-empty")
        with self._lock:
            if tool.name in self._snapshot and not replace:
                raise ValueError(f"Tool '{tool.name}' already registered")
            data = dict(self._snapshot)
            data[tool.name] = tool
            self._snapshot = MappingProxyType(data)
        self.logger.debug("Tool registered", extra={"tool": tool.name})
        return tool

    def unregister(self, name: str) -> None:
        with self._lock:
            if name not in self._snapshot:
                raise KeyError(f"Tool '{name}' not found")
            data = dict(self._snapshot)
            del data[name]
            self._snapshot = MappingProxyType(data)

    def get(self, name: str) -> Optional[AITool]:
        return self._snapshot.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._snapshot)

    def select(self, tool_filter: Optional[str | ToolFilter]) -> Tuple[AITool, ...]:
        """Tools passing ``tool_filter`` in registration order."""
        flt = tool_filter if isinstance(tool_filter, ToolFilter) else ToolFilter.parse(tool_filter)
        return tuple(t for t in self._snapshot.values() if flt.should_include(t.name))

    def specs(self, tool_filter: Optional[str | ToolFilter] = None) -> Tuple[ToolSpec, ...]:
        return tuple(t.spec for t in self.select(tool_filter))

    def snapshot(self) -> Mapping[str, AITool]:
        return self._snapshot

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)


__all__ = ["ToolRegistry"]
