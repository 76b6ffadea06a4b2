"""Resolve the request's tool filter into concrete tool specs."""

from __future__ import annotations

from ...diagnostics import MessageOrigin, MessageSeverity
from ...tools import ToolFilter
from ..policy_base import RequestPolicy
from ..policy_context import PolicyContext


class ToolFilterRequestPolicy(RequestPolicy):
    """Canonicalize ``tool_filter`` and derive ``tools`` from it.

    When the request carries no explicit tools the filter selects them from
    the tool registry; explicit tools are narrowed by the filter instead. A
    filter that leaves nothing selected yields ``tools=None``.
    """

    async def apply(self, context: PolicyContext) -> None:
        request = context.request
        raw = request.tool_filter
        if raw is None:
            return
        flt = ToolFilter.parse(raw)
        canonical = flt.canonical()
        if canonical != raw:
            note = (
                f"Tool filter was empty; interpreted as '{canonical}'."
                if not raw.strip()
                else f"Tool filter normalized from '{raw}' to '{canonical}'."
            )
            context.diagnostics.add(MessageSeverity.INFO, MessageOrigin.REQUEST, note, surfaceable=False)

        if request.tools is not None:
            selected = tuple(s for s in request.tools if flt.should_include(s.name))
        elif context.tools is not None:
            selected = context.tools.specs(flt)
            for name in sorted(flt.includes):
                if not any(s.name.casefold() == name for s in selected):
                    context.diagnostics.add(
                        MessageSeverity.WARNING,
                        MessageOrigin.REQUEST,
                        f"Tool filter references unknown tool '{name}'",
                    )
        else:
            selected = ()
        context.request = request.replace(tool_filter=canonical, tools=selected or None)


__all__ = ["ToolFilterRequestPolicy"]
