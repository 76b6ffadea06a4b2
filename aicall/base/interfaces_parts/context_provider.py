"""ContextProvider Protocol (single-class module).

Sources of ambient key/value context (current time, open document, user
locale) that a request can ask to have injected ahead of its conversation.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class ContextProvider(Protocol):
    """Named source of context values.

    Keys without an underscore are namespaced as ``<provider_id>_<key>`` when
    collected; values that render empty are left out.
    """

    @property
    def provider_id(self) -> str:
        ...

    def get_context(self) -> Mapping[str, Any]:
        ...


__all__ = ["ContextProvider"]
