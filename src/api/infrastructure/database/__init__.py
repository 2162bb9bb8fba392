"""Database infrastructure - shared connection primitives."""

from infrastructure.database.exceptions import (
    DatabaseConnectionError,
    DatabaseError,
    SchemaNotReadyError,
    is_missing_relation_error,
)

__all__ = [
    "DatabaseConnectionError",
    "DatabaseError",
    "SchemaNotReadyError",
    "is_missing_relation_error",
]
