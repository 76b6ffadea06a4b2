"""Policy base classes.

Policies are small, ordered transformations. Request policies run once before
dispatch and must not perform network I/O; they only rewrite the request and
record diagnostics. Response policies run after every provider turn.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .policy_context import PolicyContext


class _Policy(ABC):
    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def apply(self, context: PolicyContext) -> None:
        """Transform ``context`` in place."""

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"{self.name}()"


class RequestPolicy(_Policy):
    """Runs before the provider call; replaces ``context.request``."""


class ResponsePolicy(_Policy):
    """Runs after each provider turn; updates ``context.response``."""


__all__ = ["RequestPolicy", "ResponsePolicy"]
