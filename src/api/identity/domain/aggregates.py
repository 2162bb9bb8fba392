"""Domain aggregates for the identity context.

Aggregates hold the state the resolution cascade reasons about and enforce
the invariants that make a binding decision trustworthy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class Tenant:
    """An isolated customer/site scope.

    ``slug`` is used for theme-scoped URL routing only; ``theme_id`` names
    the theme the tenant is bound to, if any.
    """

    id: str
    name: str
    slug: str | None = None
    theme_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class User:
    """A platform user.

    Business rules:
    - A non-super-admin user always has a tenant (enforced by a table
      check constraint; rows that violate it are rejected at theme binding)
    - A super admin may have no tenant and may select one per request
    """

    id: int
    email: str
    role: str
    tenant_id: str | None
    first_name: str | None = None
    last_name: str | None = None
    is_super_admin: bool = False
    is_active: bool = True


@dataclass
class AccessKey:
    """A long-lived secret bound to exactly one user.

    Business rules:
    - Keys are matched case-insensitively
    - Revocation is irreversible
    - Usage is tracked via last_used_at on a best-effort basis
    """

    id: int
    user_id: int
    key: str
    key_name: str | None = None
    is_active: bool = True
    last_used_at: datetime | None = None

    @staticmethod
    def normalize(raw_key: str) -> str:
        """Normalize a raw key for lookup (trimmed, lower-cased)."""
        return raw_key.strip().lower()

    def revoke(self) -> None:
        """Revoke this key, making it unusable.

        Raises:
            AccessKeyAlreadyRevokedError: If the key is already revoked
        """
        from identity.ports.exceptions import AccessKeyAlreadyRevokedError

        if not self.is_active:
            raise AccessKeyAlreadyRevokedError(f"Access key {self.id} is already revoked")

        self.is_active = False

    def record_usage(self, at: datetime | None = None) -> None:
        """Record that this key authenticated a request."""
        self.last_used_at = at or datetime.now(UTC)
