"""Tracing facade over the OpenTelemetry API.

The orchestrator wraps calls, provider executions and streams in spans. The
``opentelemetry-api`` package is a no-op until an SDK and exporter are
configured by the host application, so importing it has no side effects.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from opentelemetry import trace

SERVICE_NAME = "aicall"


def get_tracer(service_name: str = SERVICE_NAME) -> trace.Tracer:
    """Return the tracer for ``service_name`` from the global provider."""
    return trace.get_tracer(service_name)


def start_span(name: str, *, attributes: Optional[Mapping[str, Any]] = None, service_name: str = SERVICE_NAME):
    """Start a span as the current span and return its context manager.

    Usage::

        with start_span("aicall.call", attributes={"provider": "openai"}) as span:
            span.set_attribute("model", "gpt-4o-mini")

    ``None`` valued attributes are dropped since OpenTelemetry rejects them.
    """
    attrs = {k: v for k, v in (attributes or {}).items() if v is not None}
    return get_tracer(service_name).start_as_current_span(name, attributes=attrs or None)


def open_span(name: str, *, attributes: Optional[Mapping[str, Any]] = None, service_name: str = SERVICE_NAME):
    """Start a detached span; the caller must call ``span.end()``.

    Used by async generators, whose steps may resume in different contexts,
    where attaching the span as current would fail on detach.
    """
    attrs = {k: v for k, v in (attributes or {}).items() if v is not None}
    return get_tracer(service_name).start_span(name, attributes=attrs or None)


__all__ = ["get_tracer", "start_span", "open_span", "SERVICE_NAME"]
