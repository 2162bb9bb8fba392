"""Tenant selection strategies for the resolution cascade.

Each strategy looks at the extracted credentials and either produces a
ResolutionContext, declines by returning None, or raises a terminal
ResolutionError. The cascade tries the key strategies in order, so
precedence lives in the list handed to it rather than in branching.
"""

from __future__ import annotations

from typing import Protocol

from identity.application.access_keys import AccessKeyAuthenticator
from identity.application.credentials import Credentials
from identity.domain.aggregates import User
from identity.domain.value_objects import (
    ResolutionContext,
    ResolutionSource,
    UserSummary,
)
from identity.ports.exceptions import (
    NoTenantAssociationError,
    TenantNotFoundError,
)
from identity.ports.repositories import (
    ITenantApiKeyValidator,
    ITenantRepository,
)


class ResolutionStrategy(Protocol):
    """A single step that may select the tenant for a request."""

    name: str

    async def attempt(self, credentials: Credentials) -> ResolutionContext | None:
        """Try to resolve a context from the credentials.

        Returns:
            A ResolutionContext, or None to let the next strategy try

        Raises:
            ResolutionError: If the credential is recognised but unusable
        """
        ...


class TenantApiKeyStrategy:
    """Resolves a tenant from a tenant-scoped API key. Never attaches a user."""

    name = "tenant_api_key"

    def __init__(self, validator: ITenantApiKeyValidator) -> None:
        self._validator = validator

    async def attempt(self, credentials: Credentials) -> ResolutionContext | None:
        api_key = credentials.api_key
        if api_key is None:
            return None

        tenant_id = await self._validator.validate(api_key)
        if tenant_id is None:
            return None

        return ResolutionContext(
            tenant_id=tenant_id,
            source=ResolutionSource.TENANT_API_KEY,
        )


class UserAccessKeyStrategy:
    """Resolves a tenant and user from a user access key.

    The key is normalized before lookup so matching is case-insensitive.
    A super admin may pick the active tenant per request; any other user
    is always bound to their own tenant, whatever overrides are supplied.
    """

    name = "user_access_key"

    def __init__(self, authenticator: AccessKeyAuthenticator) -> None:
        self._authenticator = authenticator

    async def attempt(self, credentials: Credentials) -> ResolutionContext | None:
        api_key = credentials.api_key
        if api_key is None:
            return None

        owner = await self._authenticator.authenticate(api_key)
        if owner is None:
            return None

        tenant_id = self.tenant_for(owner, credentials)
        if tenant_id is None:
            raise NoTenantAssociationError()

        return ResolutionContext(
            tenant_id=tenant_id,
            source=ResolutionSource.USER_ACCESS_KEY,
            user=UserSummary.from_user(owner),
        )

    @staticmethod
    def tenant_for(owner: User, credentials: Credentials) -> str | None:
        """Pick the active tenant for an access key owner.

        Super admins: query override, then header override, then their own
        tenant. Everyone else: their own tenant.
        """
        if owner.is_super_admin:
            return credentials.override_tenant_id or owner.tenant_id
        return owner.tenant_id


class TenantIdFallbackStrategy:
    """Resolves a tenant from a bare tenant id when no key was supplied."""

    name = "tenant_id"

    def __init__(self, tenants: ITenantRepository) -> None:
        self._tenants = tenants

    async def attempt(self, credentials: Credentials) -> ResolutionContext | None:
        candidate = credentials.fallback_tenant_id
        if candidate is None:
            return None

        tenant = await self._tenants.get_by_id(candidate)
        if tenant is None:
            raise TenantNotFoundError()

        # Use the canonical id from the directory, not the raw input
        return ResolutionContext(
            tenant_id=tenant.id,
            source=ResolutionSource.TENANT_ID,
        )
