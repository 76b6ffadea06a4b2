"""Ordered request/response policy pipeline.

A pipeline is immutable once built and is shared by concurrent calls.
Policies run strictly in list order. Cancellation is checked before each
policy starts. A policy that raises anything other than a cancellation is
recorded as a WARNING (``POLICY_FAILED``) naming the policy, and the
remaining policies still run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from ..cancellation import CancelledError
from ..diagnostics import MessageCode, MessageOrigin, MessageSeverity
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import CallRequest, CallResponse
from .policy_base import RequestPolicy, ResponsePolicy
from .policy_context import PolicyContext
from .request import (
    ContextInjectionRequestPolicy,
    ModelResolutionRequestPolicy,
    RequestTimeoutPolicy,
    SchemaAttachRequestPolicy,
    ToolFilterRequestPolicy,
)
from .response import (
    CompatibilityDecodeResponsePolicy,
    FinishReasonNormalizePolicy,
    SchemaValidationResponsePolicy,
)

if TYPE_CHECKING:
    from ...config.settings import OrchestrationSettings

_LOGGER = get_logger("aicall.policies")


class PolicyPipeline:
    """Request and response policy lists executed around provider calls."""

    def __init__(
        self,
        request_policies: Iterable[RequestPolicy] = (),
        response_policies: Iterable[ResponsePolicy] = (),
    ) -> None:
        self._request: Tuple[RequestPolicy, ...] = tuple(request_policies)
        self._response: Tuple[ResponsePolicy, ...] = tuple(response_policies)

    @property
    def request_policies(self) -> Tuple[RequestPolicy, ...]:
        return self._request

    @property
    def response_policies(self) -> Tuple[ResponsePolicy, ...]:
        return self._response

    def with_request_policy(self, policy: RequestPolicy) -> "PolicyPipeline":
        return PolicyPipeline(self._request + (policy,), self._response)

    def with_response_policy(self, policy: ResponsePolicy) -> "PolicyPipeline":
        return PolicyPipeline(self._request, self._response + (policy,))

    @classmethod
    def default(cls, settings: Optional["OrchestrationSettings"] = None) -> "PolicyPipeline":
        """Standard pipeline.

        Request: timeout clamp, tool filter, context injection, model
        resolution, schema attach.
        Response: compatibility decode, finish reason normalization, schema
        validation.
        """
        timeout = RequestTimeoutPolicy()
        allow_unregistered = False
        if settings is not None:
            timeout = RequestTimeoutPolicy(default_seconds=settings.default_timeout_seconds)
            allow_unregistered = settings.allow_unregistered_models
        return cls(
            (
                timeout,
                ToolFilterRequestPolicy(),
                ContextInjectionRequestPolicy(),
                ModelResolutionRequestPolicy(allow_unregistered_models=allow_unregistered),
                SchemaAttachRequestPolicy(),
            ),
            (
                CompatibilityDecodeResponsePolicy(),
                FinishReasonNormalizePolicy(),
                SchemaValidationResponsePolicy(),
            ),
        )

    async def apply_request_policies(self, context: PolicyContext) -> CallRequest:
        """Run request policies in order and return the final request.

        Raises:
            CancelledError: when the token is (or becomes) cancelled.
        """
        for policy in self._request:
            context.cancellation.raise_if_cancelled()
            try:
                await policy.apply(context)
            except CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001 - recorded as a diagnostic
                self._record_failure(context, policy.name, exc, MessageOrigin.REQUEST, "Request")
        return context.request

    async def apply_response_policies(self, context: PolicyContext) -> Optional[CallResponse]:
        """Run response policies in order on ``context.response``."""
        if context.response is None:
            return None
        for policy in self._response:
            context.cancellation.raise_if_cancelled()
            try:
                await policy.apply(context)
            except CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001 - recorded as a diagnostic
                self._record_failure(context, policy.name, exc, MessageOrigin.RETURN, "Response")
        return context.response

    @staticmethod
    def _record_failure(
        context: PolicyContext, name: str, exc: Exception, origin: MessageOrigin, phase: str
    ) -> None:
        context.diagnostics.add(
            MessageSeverity.WARNING,
            origin,
            f"{phase} policy {name} failed: {exc}",
            code=MessageCode.POLICY_FAILED,
        )
        req = context.request
        normalized_log_event(
            _LOGGER,
            "policy.failed",
            LogContext(provider=req.provider, model=req.model, request_id=req.request_id),
            phase=phase.lower(),
            error_code=MessageCode.POLICY_FAILED.name.lower(),
            level=logging.WARNING,
            policy=name,
            error=f"{type(exc).__name__}: {exc}",
        )

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"PolicyPipeline(request={list(self._request)}, response={list(self._response)})"


__all__ = ["PolicyPipeline"]
