"""Domain probe for session token verification.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to session token verification.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SessionTokenProbe(Protocol):
    """Domain probe for session token verification."""

    def token_verified(self, subject: str) -> None:
        """Record that a token was successfully verified."""
        ...

    def token_verification_failed(self, reason: str) -> None:
        """Record that token verification failed."""
        ...

    def with_context(self, context: ObservationContext) -> SessionTokenProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionTokenProbe:
    """Default implementation of SessionTokenProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultSessionTokenProbe:
        """Create a new probe with observation context bound."""
        return DefaultSessionTokenProbe(logger=self._logger, context=context)

    def token_verified(self, subject: str) -> None:
        """Record that a token was successfully verified."""
        self._logger.debug(
            "session_token_verified",
            subject=subject,
            **self._get_context_kwargs(),
        )

    def token_verification_failed(self, reason: str) -> None:
        """Record that token verification failed."""
        self._logger.debug(
            "session_token_verification_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )
