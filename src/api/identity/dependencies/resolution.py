"""FastAPI dependencies for tenant and identity resolution.

Wires the request into the resolution cascade:
readiness gate -> credential extraction -> cascade -> (theme binding).

Usage in FastAPI routes:
    @router.get("/example")
    async def example(
        context: Annotated[ResolutionContext, Depends(resolve_context)],
    ):
        # context.tenant_id is the active tenant, context.user is optional
        ...
"""

from __future__ import annotations

from datetime import datetime, timedelta
from functools import lru_cache
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from identity.application.access_keys import AccessKeyAuthenticator
from identity.application.cascade import ResolutionCascade
from identity.application.credentials import Credentials, extract_credentials
from identity.application.enrichment import SessionTokenEnricher
from identity.application.observability import (
    DefaultResolutionProbe,
    DefaultThemeBindingProbe,
    ResolutionProbe,
    ThemeBindingProbe,
)
from identity.application.strategies import (
    TenantApiKeyStrategy,
    TenantIdFallbackStrategy,
    UserAccessKeyStrategy,
)
from identity.application.theme_binding import ThemeTenantBindingResolver
from identity.application.usage import AccessKeyUsageRecorder
from identity.domain.value_objects import ResolutionContext, ThemeBinding
from identity.infrastructure.access_key_repository import AccessKeyRepository
from identity.infrastructure.observability import (
    DefaultKeyRepositoryProbe,
    DefaultTenantRepositoryProbe,
)
from identity.infrastructure.tenant_api_key_repository import TenantApiKeyRepository
from identity.infrastructure.tenant_repository import TenantRepository
from identity.infrastructure.user_repository import UserRepository
from infrastructure.database.dependencies import get_read_session, get_write_sessionmaker
from infrastructure.readiness import StoreReadinessGate
from infrastructure.settings import get_auth_settings
from shared_kernel.auth import DefaultSessionTokenProbe, SessionTokenVerifier
from shared_kernel.observability_context import ObservationContext

REQUEST_ID_HEADER = "x-request-id"


# ---------------------------------------------------------------------------
# Application state
# ---------------------------------------------------------------------------


def get_readiness_gate(request: Request) -> StoreReadinessGate:
    """Get the process-wide readiness gate created at startup."""
    return request.app.state.readiness_gate


def get_usage_recorder(request: Request) -> AccessKeyUsageRecorder:
    """Get the process-wide access key usage recorder."""
    return request.app.state.usage_recorder


async def record_access_key_usage(access_key_id: int, used_at: datetime) -> None:
    """Persist an access key touch on its own write session.

    Runs outside the request, so it cannot share the request's session.
    """
    sessionmaker = get_write_sessionmaker()
    async with sessionmaker() as session:
        await AccessKeyRepository(session).touch_last_used(access_key_id, used_at)


@lru_cache
def get_session_token_verifier() -> SessionTokenVerifier:
    """Get cached session token verifier configured from auth settings."""
    settings = get_auth_settings()
    return SessionTokenVerifier(
        secret=settings.session_token_secret.get_secret_value(),
        probe=DefaultSessionTokenProbe(),
        algorithm=settings.session_token_algorithm,
        leeway=timedelta(seconds=settings.leeway_seconds),
    )


# ---------------------------------------------------------------------------
# Request-scoped observability
# ---------------------------------------------------------------------------


def get_observation_context(
    x_request_id: Annotated[str | None, Header(alias=REQUEST_ID_HEADER)] = None,
) -> ObservationContext:
    """Build the observation context for this request."""
    return ObservationContext(request_id=x_request_id or uuid4().hex)


def get_resolution_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> ResolutionProbe:
    return DefaultResolutionProbe().with_context(context)


def get_theme_binding_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> ThemeBindingProbe:
    return DefaultThemeBindingProbe().with_context(context)


# ---------------------------------------------------------------------------
# Cascade assembly
# ---------------------------------------------------------------------------


def get_credentials(request: Request) -> Credentials:
    """Extract every credential candidate from the request."""
    return extract_credentials(request.headers, request.query_params)


def get_access_key_authenticator(
    session: Annotated[AsyncSession, Depends(get_read_session)],
    recorder: Annotated[AccessKeyUsageRecorder, Depends(get_usage_recorder)],
    observation: Annotated[ObservationContext, Depends(get_observation_context)],
    probe: Annotated[ResolutionProbe, Depends(get_resolution_probe)],
) -> AccessKeyAuthenticator:
    repository = AccessKeyRepository(
        session, probe=DefaultKeyRepositoryProbe().with_context(observation)
    )
    return AccessKeyAuthenticator(repository, usage_recorder=recorder, probe=probe)


def get_resolution_cascade(
    gate: Annotated[StoreReadinessGate, Depends(get_readiness_gate)],
    session: Annotated[AsyncSession, Depends(get_read_session)],
    authenticator: Annotated[
        AccessKeyAuthenticator, Depends(get_access_key_authenticator)
    ],
    verifier: Annotated[SessionTokenVerifier, Depends(get_session_token_verifier)],
    observation: Annotated[ObservationContext, Depends(get_observation_context)],
    probe: Annotated[ResolutionProbe, Depends(get_resolution_probe)],
) -> ResolutionCascade:
    """Assemble the cascade with strategies in precedence order."""
    key_probe = DefaultKeyRepositoryProbe().with_context(observation)
    tenants = TenantRepository(
        session, probe=DefaultTenantRepositoryProbe().with_context(observation)
    )

    return ResolutionCascade(
        gate=gate,
        key_strategies=[
            TenantApiKeyStrategy(TenantApiKeyRepository(session, probe=key_probe)),
            UserAccessKeyStrategy(authenticator),
        ],
        fallback=TenantIdFallbackStrategy(tenants),
        enricher=SessionTokenEnricher(
            verifier, UserRepository(session, probe=key_probe), probe=probe
        ),
        probe=probe,
    )


def get_theme_binding_resolver(
    session: Annotated[AsyncSession, Depends(get_read_session)],
    observation: Annotated[ObservationContext, Depends(get_observation_context)],
    probe: Annotated[ThemeBindingProbe, Depends(get_theme_binding_probe)],
) -> ThemeTenantBindingResolver:
    tenants = TenantRepository(
        session, probe=DefaultTenantRepositoryProbe().with_context(observation)
    )
    return ThemeTenantBindingResolver(tenants, probe=probe)


# ---------------------------------------------------------------------------
# Route-facing dependencies
# ---------------------------------------------------------------------------


async def resolve_context(
    cascade: Annotated[ResolutionCascade, Depends(get_resolution_cascade)],
    credentials: Annotated[Credentials, Depends(get_credentials)],
) -> ResolutionContext:
    """Resolve the tenant and optional user for the current request.

    Raises:
        ResolutionError: Rendered by the application's exception handler
    """
    return await cascade.resolve(credentials)


async def resolve_theme_context(
    theme_slug: str,
    context: Annotated[ResolutionContext, Depends(resolve_context)],
    resolver: Annotated[
        ThemeTenantBindingResolver, Depends(get_theme_binding_resolver)
    ],
) -> ThemeBinding:
    """Resolve the context, then bind it to the route's theme.

    Routes using this dependency must declare a ``{theme_slug}`` path segment.
    """
    return await resolver.bind(context, theme_slug)
