"""Store readiness gate and the startup sequence that opens it.

The gate is constructed once per process, placed on ``app.state`` and read
by every request. Only the startup sequence writes it, and it settles
exactly once: from ``initializing`` to either ``ready`` or ``failed``.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.exceptions import (
    DatabaseConnectionError,
    DatabaseError,
    SchemaNotReadyError,
)
from infrastructure.observability import DefaultStartupProbe, StartupProbe

# Tables the resolution cascade reads from
REQUIRED_TABLES: tuple[str, ...] = (
    "tenants",
    "users",
    "user_access_keys",
    "tenant_api_keys",
)


class StoreStatus(StrEnum):
    """Readiness of the backing data store."""

    READY = "ready"
    INITIALIZING = "initializing"
    FAILED = "failed"


class StoreReadinessGate:
    """Process-wide readiness flag with a single writer.

    Readers call ``status`` or ``is_ready``; there are no locks because the
    value only changes once, before or while the first requests arrive.
    """

    def __init__(self, status: StoreStatus = StoreStatus.INITIALIZING):
        self._status = status
        self._error: str | None = None

    @property
    def status(self) -> StoreStatus:
        return self._status

    @property
    def error(self) -> str | None:
        """Reason the startup sequence failed, for operators only."""
        return self._error

    @property
    def is_ready(self) -> bool:
        return self._status is StoreStatus.READY

    def mark_ready(self) -> None:
        """Open the gate.

        Raises:
            RuntimeError: If the gate has already settled
        """
        self._settle(StoreStatus.READY)

    def mark_failed(self, error: str) -> None:
        """Close the gate permanently after startup gave up.

        Raises:
            RuntimeError: If the gate has already settled
        """
        self._settle(StoreStatus.FAILED)
        self._error = error

    def _settle(self, status: StoreStatus) -> None:
        if self._status is not StoreStatus.INITIALIZING:
            raise RuntimeError(
                f"Readiness gate already settled as {self._status}, cannot set {status}"
            )
        self._status = status


async def check_store(
    engine: AsyncEngine,
    required_tables: tuple[str, ...] = REQUIRED_TABLES,
) -> None:
    """Verify connectivity and that every required table exists.

    Raises:
        DatabaseConnectionError: If the store cannot be queried
        SchemaNotReadyError: If any required table is missing
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            missing = []
            for table in required_tables:
                result = await conn.execute(
                    text("SELECT to_regclass(:name)"), {"name": table}
                )
                if result.scalar() is None:
                    missing.append(table)
    except (SQLAlchemyError, OSError) as e:
        raise DatabaseConnectionError(f"Store check failed: {e}") from e

    if missing:
        raise SchemaNotReadyError(
            f"Missing tables: {', '.join(missing)}", missing_tables=missing
        )


async def run_startup_sequence(
    gate: StoreReadinessGate,
    engine: AsyncEngine,
    *,
    max_attempts: int,
    retry_delay_seconds: float,
    required_tables: tuple[str, ...] = REQUIRED_TABLES,
    probe: StartupProbe | None = None,
) -> StoreStatus:
    """Check the store with retries, then settle the gate.

    Args:
        gate: The gate to open or fail
        engine: Engine used for the connectivity and schema checks
        max_attempts: Number of checks before giving up
        retry_delay_seconds: Sleep between failed attempts
        required_tables: Tables that must exist for the gate to open
        probe: Optional domain probe for observability

    Returns:
        The status the gate settled on
    """
    probe = probe or DefaultStartupProbe()
    last_error: DatabaseError | None = None

    for attempt in range(1, max_attempts + 1):
        probe.store_check_started(attempt, max_attempts)
        try:
            await check_store(engine, required_tables)
        except SchemaNotReadyError as e:
            probe.store_schema_missing(e.missing_tables)
            last_error = e
        except DatabaseConnectionError as e:
            probe.store_check_failed(attempt, max_attempts, e)
            last_error = e
        else:
            gate.mark_ready()
            probe.store_ready()
            return gate.status

        if attempt < max_attempts:
            await asyncio.sleep(retry_delay_seconds)

    reason = str(last_error) if last_error else "Store check was never attempted"
    gate.mark_failed(reason)
    probe.store_failed(reason)
    return gate.status
