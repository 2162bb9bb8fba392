"""Repository protocols (ports) for the identity bounded context.

These are the collaborator interfaces the resolution cascade depends on.
PostgreSQL implementations live in ``identity.infrastructure``; tests
substitute in-memory fakes or AsyncMocks.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from identity.domain.aggregates import AccessKey, Tenant, User


@runtime_checkable
class ITenantRepository(Protocol):
    """Tenant directory lookups."""

    async def get_by_id(self, tenant_id: str) -> Tenant | None:
        """Retrieve a tenant by its id.

        Args:
            tenant_id: The raw tenant id supplied by the caller

        Returns:
            The canonical Tenant record, or None if not found
        """
        ...

    async def list_by_theme(self, theme_slug: str) -> list[Tenant]:
        """List tenants bound to a theme, newest first.

        Args:
            theme_slug: The theme slug from a theme-scoped route

        Returns:
            Tenants whose theme is ``theme_slug``, ordered by created_at DESC
        """
        ...


@runtime_checkable
class ITenantApiKeyValidator(Protocol):
    """Validates opaque tenant-scoped API keys."""

    async def validate(self, api_key: str) -> str | None:
        """Validate a tenant API key.

        Args:
            api_key: The raw key as supplied

        Returns:
            The bound tenant id, or None if the key is invalid or expired
        """
        ...


@runtime_checkable
class IAccessKeyRepository(Protocol):
    """User access key lookups and lifecycle."""

    async def get_active_with_owner(
        self, normalized_key: str
    ) -> tuple[AccessKey, User] | None:
        """Find an active access key joined to its owning user.

        Args:
            normalized_key: The key after trimming and lower-casing

        Returns:
            (AccessKey, owner) or None if no active key matches
        """
        ...

    async def touch_last_used(self, access_key_id: int, used_at: datetime) -> None:
        """Set last_used_at on an access key."""
        ...

    async def revoke(self, access_key_id: int) -> AccessKey:
        """Deactivate an access key permanently.

        Raises:
            AccessKeyAlreadyRevokedError: If the key is already inactive
            LookupError: If the key does not exist
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """User lookups."""

    async def get_by_id(self, user_id: int) -> User | None:
        """Retrieve a user by id, or None if not found."""
        ...
