"""Opportunistic user enrichment from a session token.

After a tenant has been chosen by a tenant API key or by a bare tenant id,
a structured bearer token may add the signed-in user to the context. This
step never fails a request and never changes the tenant.
"""

from __future__ import annotations

from identity.application.credentials import Credentials
from identity.application.observability import (
    DefaultResolutionProbe,
    ResolutionProbe,
)
from identity.domain.value_objects import ResolutionContext, UserSummary
from identity.ports.repositories import IUserRepository
from shared_kernel.auth import InvalidTokenError, SessionTokenVerifier


class SessionTokenEnricher:
    """Attaches the session token's subject user to a resolved context."""

    def __init__(
        self,
        verifier: SessionTokenVerifier,
        users: IUserRepository,
        probe: ResolutionProbe | None = None,
    ) -> None:
        self._verifier = verifier
        self._users = users
        self._probe = probe or DefaultResolutionProbe()

    async def enrich(
        self, context: ResolutionContext, credentials: Credentials
    ) -> ResolutionContext:
        """Return the context with a user attached when a valid token allows it.

        Every failure (bad signature, expiry, unknown or inactive subject,
        lookup error) leaves the context unchanged.
        """
        if context.user is not None:
            return context

        token = credentials.session_token
        if token is None:
            return context

        try:
            claims = self._verifier.verify(token)
        except InvalidTokenError:
            self._probe.session_enrichment_skipped("invalid_token")
            return context

        try:
            user_id = int(claims.subject)
        except (TypeError, ValueError):
            self._probe.session_enrichment_skipped("malformed_subject")
            return context

        try:
            user = await self._users.get_by_id(user_id)
        except Exception as e:
            self._probe.unexpected_error("session_enrichment", e)
            return context

        if user is None:
            self._probe.session_enrichment_skipped("unknown_subject")
            return context

        if not user.is_active:
            self._probe.session_enrichment_skipped("inactive_subject")
            return context

        self._probe.session_user_attached(context.tenant_id, user.id)
        return context.with_user(UserSummary.from_user(user))
