"""Database-specific exceptions and error classification helpers."""

from __future__ import annotations

# PostgreSQL SQLSTATE for "relation does not exist"
UNDEFINED_TABLE_SQLSTATE = "42P01"


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when database connection fails."""

    pass


class SchemaNotReadyError(DatabaseError):
    """Raised when the connection works but required tables are missing."""

    def __init__(self, message: str, missing_tables: list[str] | None = None):
        super().__init__(message)
        self.missing_tables = missing_tables or []


def is_missing_relation_error(error: BaseException) -> bool:
    """Check whether an error means a table has not been created yet.

    Walks the exception chain (SQLAlchemy wraps driver errors in ``orig``
    and ``__cause__``) looking for SQLSTATE 42P01 or the PostgreSQL
    "relation ... does not exist" message.

    Args:
        error: The exception raised by a store collaborator

    Returns:
        True if the error belongs to the missing-relation class
    """
    seen: set[int] = set()
    current: BaseException | None = error

    while current is not None and id(current) not in seen:
        seen.add(id(current))

        for attr in ("sqlstate", "pgcode"):
            if getattr(current, attr, None) == UNDEFINED_TABLE_SQLSTATE:
                return True

        message = str(current).lower()
        if "relation" in message and "does not exist" in message:
            return True

        orig = getattr(current, "orig", None)
        current = orig if isinstance(orig, BaseException) else current.__cause__

    return False
