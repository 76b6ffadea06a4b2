"""Attach the output schema as a provider-agnostic envelope.

Providers require an object root for structured output. Other roots are
wrapped in a single-property object:

* ``array``: property ``items``
* ``string``/``number``/``integer``/``boolean``: property ``value``
* anything else: property ``data``

The envelope records the wrapper property so the response side can unwrap
the payload again.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from ..policy_base import RequestPolicy
from ..policy_context import PolicyContext

RESPONSE_SCHEMA_KEY = "response_schema"

_SCALARS = frozenset({"string", "number", "integer", "boolean"})


def wrap_schema(schema: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Return ``(provider_schema, wrapper_property)``; the property is ``None`` for object roots."""
    root = str(schema.get("type", "")).lower()
    if root == "object":
        return dict(schema), None
    prop = "items" if root == "array" else "value" if root in _SCALARS else "data"
    wrapped = {
        "type": "object",
        "properties": {prop: dict(schema)},
        "required": [prop],
        "additionalProperties": False,
    }
    return wrapped, prop


class SchemaAttachRequestPolicy(RequestPolicy):
    """Serialize ``output_schema`` into ``extra["response_schema"]``; no-op without a schema."""

    async def apply(self, context: PolicyContext) -> None:
        request = context.request
        if request.output_schema is None:
            return
        wrapped, wrapper = wrap_schema(request.output_schema)
        envelope = {
            "name": str(request.output_schema.get("title") or "response"),
            "schema": wrapped,
            "strict": True,
            "wrapper": wrapper,
        }
        context.request = request.with_extra(**{RESPONSE_SCHEMA_KEY: envelope})


__all__ = ["SchemaAttachRequestPolicy", "wrap_schema", "RESPONSE_SCHEMA_KEY"]
