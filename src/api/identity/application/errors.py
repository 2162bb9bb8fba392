"""Mapping of unexpected collaborator failures onto the resolution taxonomy."""

from __future__ import annotations

from infrastructure.database.exceptions import is_missing_relation_error
from identity.ports.exceptions import (
    InternalResolutionError,
    ResolutionError,
    StoreUnavailableError,
)


def reclassify_unexpected(error: Exception) -> ResolutionError:
    """Turn a non-taxonomy error into the caller-facing failure.

    A missing table during the startup race window means the store is
    still initializing. Anything else is internal; the original error text
    is never carried over.
    """
    if is_missing_relation_error(error):
        return StoreUnavailableError.initializing()
    return InternalResolutionError()
