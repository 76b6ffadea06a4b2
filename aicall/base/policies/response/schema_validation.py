"""Validate structured output against the requested schema."""

from __future__ import annotations

from ...diagnostics import MessageCode, MessageOrigin, MessageSeverity
from ...tools import validate_against_schema
from ..policy_base import ResponsePolicy
from ..policy_context import PolicyContext


class SchemaValidationResponsePolicy(ResponsePolicy):
    """Report schema violations as a RETURN_INVALID warning; the response is kept."""

    max_reported = 5

    async def apply(self, context: PolicyContext) -> None:
        response = context.response
        schema = context.request.output_schema
        if response is None or not schema or response.structured is None:
            return
        problems = validate_against_schema(response.structured, schema)
        if not problems:
            return
        shown = "; ".join(problems[: self.max_reported])
        if len(problems) > self.max_reported:
            shown += f" (+{len(problems) - self.max_reported} more)"
        context.diagnostics.add(
            MessageSeverity.WARNING,
            MessageOrigin.RETURN,
            f"Structured output does not match schema: {shown}",
            code=MessageCode.RETURN_INVALID,
        )


__all__ = ["SchemaValidationResponsePolicy"]
