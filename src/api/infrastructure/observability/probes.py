"""Domain probe for database engine lifecycle events.

Engines are created lazily on first use and disposed on shutdown; this
probe records both so operators can see which pools a process holds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database engine observability."""

    def engine_created(
        self, role: str, host: str, database: str, pool_size: int
    ) -> None:
        """Record that a read or write engine was created."""
        ...

    def engine_disposed(self, role: str) -> None:
        """Record that an engine and its pool were disposed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog.

    Hosts and database names are logged; credentials never are.
    """

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

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def engine_created(
        self, role: str, host: str, database: str, pool_size: int
    ) -> None:
        self._logger.info(
            "database_engine_created",
            role=role,
            host=host,
            database=database,
            pool_size=pool_size,
            **self._get_context_kwargs(),
        )

    def engine_disposed(self, role: str) -> None:
        self._logger.info(
            "database_engine_disposed",
            role=role,
            **self._get_context_kwargs(),
        )
