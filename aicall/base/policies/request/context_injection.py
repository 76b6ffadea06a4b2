"""Inject registered context as the leading turn of the conversation."""

from __future__ import annotations

from ...models import Message
from ..policy_base import RequestPolicy
from ..policy_context import PolicyContext

CONTEXT_HEADER = "Conversation context:\n\n"


class ContextInjectionRequestPolicy(RequestPolicy):
    """Prepend a ``Conversation context:`` turn selected by ``context_filter``.

    Earlier context turns are dropped so repeated rounds of a call carry one
    fresh context turn. No-op without a context registry, for a blank or
    ``"-*"`` filter, or when every selected value is empty.
    """

    async def apply(self, context: PolicyContext) -> None:
        request = context.request
        raw = (request.context_filter or "").strip()
        if context.contexts is None or not raw or raw == "-*":
            return
        items = [(k, v) for k, v in context.contexts.current_context(raw).items() if v]
        if not items:
            return
        body = CONTEXT_HEADER + "".join(f"- {key}: {value}\n" for key, value in items)
        rest = tuple(m for m in request.messages if not m.is_context)
        context.request = request.with_messages((Message.context(body),) + rest)


__all__ = ["ContextInjectionRequestPolicy", "CONTEXT_HEADER"]
