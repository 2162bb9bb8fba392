"""The tenant and identity resolution cascade.

Runs once per request:

1. The store readiness gate must be open.
2. If an API-key-class credential is present, the key strategies are tried
   in order; if none recognises it, the request is rejected.
3. Otherwise the tenant id fallback selects the tenant, or the request is
   rejected for carrying no credential at all.
4. A structured bearer token may then attach a user.

A session token on its own never selects a tenant.
"""

from __future__ import annotations

from collections.abc import Sequence

from identity.application.credentials import Credentials
from identity.application.enrichment import SessionTokenEnricher
from identity.application.errors import reclassify_unexpected
from identity.application.observability import (
    DefaultResolutionProbe,
    ResolutionProbe,
)
from identity.application.strategies import ResolutionStrategy
from identity.domain.value_objects import ResolutionContext
from identity.ports.exceptions import (
    InvalidApiKeyError,
    MissingCredentialsError,
    ResolutionError,
    StoreUnavailableError,
)
from infrastructure.readiness import StoreReadinessGate, StoreStatus


def ensure_store_ready(
    gate: StoreReadinessGate, probe: ResolutionProbe | None = None
) -> None:
    """Short-circuit when the backing store is not ready.

    Raises:
        StoreUnavailableError: STORE_INITIALIZING or STORE_UNAVAILABLE
    """
    if gate.is_ready:
        return

    error = (
        StoreUnavailableError.failed()
        if gate.status is StoreStatus.FAILED
        else StoreUnavailableError.initializing()
    )
    if probe is not None:
        probe.store_not_ready(error.code)
    raise error


class ResolutionCascade:
    """Orchestrates credential strategies into a ResolutionContext."""

    def __init__(
        self,
        gate: StoreReadinessGate,
        key_strategies: Sequence[ResolutionStrategy],
        fallback: ResolutionStrategy,
        enricher: SessionTokenEnricher | None = None,
        probe: ResolutionProbe | None = None,
    ) -> None:
        """Initialize the cascade.

        Args:
            gate: Readiness gate consulted before any credential logic
            key_strategies: Strategies for API-key-class credentials, in
                precedence order
            fallback: Strategy used when no API-key-class credential exists
            enricher: Optional session token enricher
            probe: Optional domain probe for observability
        """
        self._gate = gate
        self._key_strategies = tuple(key_strategies)
        self._fallback = fallback
        self._enricher = enricher
        self._probe = probe or DefaultResolutionProbe()

    async def resolve(self, credentials: Credentials) -> ResolutionContext:
        """Resolve the tenant and optional user for one request.

        Raises:
            StoreUnavailableError: Gate closed, or a table is missing
            UnauthenticatedError: Missing or invalid credential, inactive user
            UnauthorizedError: Access key owner has no tenant to act on
            TenantNotFoundError: Fallback tenant id does not resolve
            InternalResolutionError: Any other collaborator failure
        """
        ensure_store_ready(self._gate, self._probe)

        try:
            context = await self._select_tenant(credentials)
        except ResolutionError as e:
            self._probe.resolution_rejected(e.code, e.status_code)
            raise
        except Exception as e:
            raise self._reclassify(e, "credential_cascade") from e

        if self._enricher is not None:
            context = await self._enricher.enrich(context, credentials)

        self._probe.context_resolved(
            tenant_id=context.tenant_id,
            source=context.source,
            user_id=context.user.id if context.user else None,
        )
        return context

    async def _select_tenant(self, credentials: Credentials) -> ResolutionContext:
        if credentials.api_key is not None:
            for strategy in self._key_strategies:
                context = await strategy.attempt(credentials)
                if context is not None:
                    return context
                self._probe.strategy_declined(strategy.name)
            # The error never names the key namespace that was tried
            raise InvalidApiKeyError()

        context = await self._fallback.attempt(credentials)
        if context is None:
            raise MissingCredentialsError()
        return context

    def _reclassify(self, error: Exception, stage: str) -> ResolutionError:
        resolved = reclassify_unexpected(error)
        if isinstance(resolved, StoreUnavailableError):
            self._probe.missing_relation_reclassified(stage)
        else:
            self._probe.unexpected_error(stage, error)
        return resolved
