"""Protocol for tenant/identity resolution observability.

Defines the interface for domain probes that capture resolution cascade
events. Raw keys and tokens are never passed to these probes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ResolutionProbe(Protocol):
    """Domain probe for the resolution cascade."""

    def context_resolved(
        self,
        tenant_id: str,
        source: str,
        user_id: int | None,
    ) -> None:
        """Record that a request was bound to a tenant."""
        ...

    def strategy_declined(self, strategy: str) -> None:
        """Record that a key strategy did not recognise the credential."""
        ...

    def resolution_rejected(self, code: str, status_code: int) -> None:
        """Record that resolution ended in a caller-facing failure."""
        ...

    def store_not_ready(self, code: str) -> None:
        """Record that the readiness gate blocked resolution."""
        ...

    def missing_relation_reclassified(self, stage: str) -> None:
        """Record a missing-relation error treated as store initialization."""
        ...

    def unexpected_error(self, stage: str, error: Exception) -> None:
        """Record an unexpected collaborator failure."""
        ...

    def session_user_attached(self, tenant_id: str, user_id: int) -> None:
        """Record that a session token added a user to the context."""
        ...

    def session_enrichment_skipped(self, reason: str) -> None:
        """Record why a session token did not add a user."""
        ...

    def usage_recording_failed(self, access_key_id: int, error: Exception) -> None:
        """Record a failed best-effort last_used_at update."""
        ...

    def with_context(self, context: ObservationContext) -> ResolutionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultResolutionProbe:
    """Default implementation of ResolutionProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultResolutionProbe:
        """Create a new probe with observation context bound."""
        return DefaultResolutionProbe(logger=self._logger, context=context)

    def context_resolved(
        self,
        tenant_id: str,
        source: str,
        user_id: int | None,
    ) -> None:
        """Record that a request was bound to a tenant."""
        self._logger.info(
            "context_resolved",
            resolved_tenant_id=tenant_id,
            source=source,
            resolved_user_id=user_id,
            **self._get_context_kwargs(),
        )

    def strategy_declined(self, strategy: str) -> None:
        """Record that a key strategy did not recognise the credential."""
        self._logger.debug(
            "strategy_declined",
            strategy=strategy,
            **self._get_context_kwargs(),
        )

    def resolution_rejected(self, code: str, status_code: int) -> None:
        """Record that resolution ended in a caller-facing failure."""
        self._logger.warning(
            "resolution_rejected",
            code=code,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def store_not_ready(self, code: str) -> None:
        """Record that the readiness gate blocked resolution."""
        self._logger.warning(
            "store_not_ready",
            code=code,
            **self._get_context_kwargs(),
        )

    def missing_relation_reclassified(self, stage: str) -> None:
        """Record a missing-relation error treated as store initialization."""
        self._logger.warning(
            "missing_relation_reclassified",
            stage=stage,
            **self._get_context_kwargs(),
        )

    def unexpected_error(self, stage: str, error: Exception) -> None:
        """Record an unexpected collaborator failure."""
        self._logger.error(
            "resolution_unexpected_error",
            stage=stage,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def session_user_attached(self, tenant_id: str, user_id: int) -> None:
        """Record that a session token added a user to the context."""
        self._logger.debug(
            "session_user_attached",
            resolved_tenant_id=tenant_id,
            resolved_user_id=user_id,
            **self._get_context_kwargs(),
        )

    def session_enrichment_skipped(self, reason: str) -> None:
        """Record why a session token did not add a user."""
        self._logger.debug(
            "session_enrichment_skipped",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def usage_recording_failed(self, access_key_id: int, error: Exception) -> None:
        """Record a failed best-effort last_used_at update."""
        self._logger.warning(
            "access_key_usage_recording_failed",
            access_key_id=access_key_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
