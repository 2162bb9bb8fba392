"""Domain probe for application startup and store readiness events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events while the backing store is brought up and
while the readiness gate rejects traffic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def store_check_started(self, attempt: int, max_attempts: int) -> None:
        """Record that a store readiness check attempt started."""
        ...

    def store_check_failed(
        self, attempt: int, max_attempts: int, error: Exception
    ) -> None:
        """Record that a store readiness check attempt failed."""
        ...

    def store_schema_missing(self, missing_tables: list[str]) -> None:
        """Record that the store is reachable but required tables are missing."""
        ...

    def store_ready(self) -> None:
        """Record that the store is ready and the gate has opened."""
        ...

    def store_failed(self, error: str) -> None:
        """Record that the startup sequence gave up and the gate failed."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def store_check_started(self, attempt: int, max_attempts: int) -> None:
        """Record that a store readiness check attempt started."""
        self._logger.info(
            "store_check_started",
            attempt=attempt,
            max_attempts=max_attempts,
            **self._get_context_kwargs(),
        )

    def store_check_failed(
        self, attempt: int, max_attempts: int, error: Exception
    ) -> None:
        """Record that a store readiness check attempt failed."""
        self._logger.warning(
            "store_check_failed",
            attempt=attempt,
            max_attempts=max_attempts,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def store_schema_missing(self, missing_tables: list[str]) -> None:
        """Record that the store is reachable but required tables are missing."""
        self._logger.warning(
            "store_schema_missing",
            missing_tables=missing_tables,
            **self._get_context_kwargs(),
        )

    def store_ready(self) -> None:
        """Record that the store is ready and the gate has opened."""
        self._logger.info(
            "store_ready",
            **self._get_context_kwargs(),
        )

    def store_failed(self, error: str) -> None:
        """Record that the startup sequence gave up and the gate failed."""
        self._logger.error(
            "store_failed",
            error=error,
            **self._get_context_kwargs(),
        )
