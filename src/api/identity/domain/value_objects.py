"""Value objects for the identity domain.

Value objects are immutable descriptors produced by resolution and handed
to downstream handlers. A ResolutionContext is created fresh per request
and never shared or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

from identity.domain.aggregates import Tenant, User


class ResolutionSource(StrEnum):
    """Which credential selected the tenant of a ResolutionContext."""

    TENANT_API_KEY = "tenant_api_key"
    USER_ACCESS_KEY = "user_access_key"
    TENANT_ID = "tenant_id"


@dataclass(frozen=True)
class UserSummary:
    """The user fields exposed to downstream handlers."""

    id: int
    email: str
    role: str
    tenant_id: str | None
    is_super_admin: bool
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_user(cls, user: User) -> UserSummary:
        """Build a summary from a User aggregate."""
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            tenant_id=user.tenant_id,
            is_super_admin=user.is_super_admin,
            first_name=user.first_name,
            last_name=user.last_name,
        )

    def as_dict(self) -> dict[str, Any]:
        """Return the outbound wire shape."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "role": self.role,
            "tenant_id": self.tenant_id,
            "is_super_admin": self.is_super_admin,
        }


@dataclass(frozen=True)
class ResolutionContext:
    """Resolved tenant and optional user for the current request.

    Attributes:
        tenant_id: The active tenant's canonical id.
        source: Which credential selected the tenant (for logging only).
        user: The authenticated user, if any.
    """

    tenant_id: str
    source: ResolutionSource
    user: UserSummary | None = None

    def with_user(self, user: UserSummary) -> ResolutionContext:
        """Return a copy with a user attached; the tenant is unchanged."""
        return replace(self, user=user)

    def with_tenant(self, tenant_id: str) -> ResolutionContext:
        """Return a copy with a different active tenant."""
        return replace(self, tenant_id=tenant_id)

    def as_dict(self) -> dict[str, Any]:
        """Return the outbound wire shape ``{tenantId, user?}``."""
        result: dict[str, Any] = {"tenantId": self.tenant_id}
        if self.user is not None:
            result["user"] = self.user.as_dict()
        return result


@dataclass(frozen=True)
class ThemeBinding:
    """Result of binding a ResolutionContext to a theme.

    Attributes:
        context: The context with the active tenant set for the theme.
        theme_slug: The theme the route is scoped to.
        tenants: The bound-tenant set after narrowing.
    """

    context: ResolutionContext
    theme_slug: str
    tenants: tuple[Tenant, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict[str, Any]:
        """Return the outbound wire shape of a theme-scoped context."""
        return {
            **self.context.as_dict(),
            "themeSlug": self.theme_slug,
            "tenants": [tenant.id for tenant in self.tenants],
        }
