"""Unit test fixtures with in-memory collaborators.

The fakes implement the identity ports with plain dictionaries so the
cascade, strategies and binding resolver run without a database.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from jose import jwt

from identity.domain.aggregates import AccessKey, Tenant, User
from infrastructure.readiness import StoreReadinessGate, StoreStatus
from shared_kernel.auth import SessionTokenVerifier

TEST_SESSION_SECRET = "test-session-secret"


class InMemoryTenantDirectory:
    """ITenantRepository backed by a dict."""

    def __init__(self, tenants: list[Tenant] | None = None):
        self.tenants = {tenant.id: tenant for tenant in tenants or []}

    async def get_by_id(self, tenant_id: str) -> Tenant | None:
        return self.tenants.get(tenant_id)

    async def list_by_theme(self, theme_slug: str) -> list[Tenant]:
        bound = [t for t in self.tenants.values() if t.theme_id == theme_slug]
        return sorted(bound, key=lambda t: t.created_at, reverse=True)


class InMemoryTenantApiKeys:
    """ITenantApiKeyValidator backed by a dict of key -> tenant id."""

    def __init__(self, keys: dict[str, str] | None = None):
        self.keys = dict(keys or {})

    async def validate(self, api_key: str) -> str | None:
        return self.keys.get(api_key)


class InMemoryUsers:
    """IUserRepository backed by a dict."""

    def __init__(self, users: list[User] | None = None):
        self.users = {user.id: user for user in users or []}

    async def get_by_id(self, user_id: int) -> User | None:
        return self.users.get(user_id)


class InMemoryAccessKeys:
    """IAccessKeyRepository backed by a dict; keys are stored lower-cased."""

    def __init__(self, users: InMemoryUsers, keys: list[AccessKey] | None = None):
        self._users = users
        self.keys = {key.id: key for key in keys or []}
        self.touches: list[tuple[int, datetime]] = []

    async def get_active_with_owner(
        self, normalized_key: str
    ) -> tuple[AccessKey, User] | None:
        for key in self.keys.values():
            if key.key == normalized_key and key.is_active:
                owner = self._users.users[key.user_id]
                return replace(key), owner
        return None

    async def touch_last_used(self, access_key_id: int, used_at: datetime) -> None:
        self.touches.append((access_key_id, used_at))
        self.keys[access_key_id].record_usage(used_at)

    async def revoke(self, access_key_id: int) -> AccessKey:
        key = self.keys.get(access_key_id)
        if key is None:
            raise LookupError(f"Access key {access_key_id} not found")
        key.revoke()
        return key


def _ts(month: int) -> datetime:
    return datetime(2024, month, 1, tzinfo=UTC)


@pytest.fixture
def tenants() -> list[Tenant]:
    """Tenants: two share the aurora theme, tenant-2 is the newest."""
    return [
        Tenant(id="tenant-1", name="Acme", slug="acme", theme_id="aurora", created_at=_ts(1)),
        Tenant(id="tenant-2", name="Globex", slug="globex", theme_id="aurora", created_at=_ts(6)),
        Tenant(id="tenant-3", name="Initech", slug="initech", theme_id=None, created_at=_ts(3)),
        Tenant(id="tenant-9", name="Umbrella", slug="umbrella", theme_id="zen", created_at=_ts(2)),
    ]


@pytest.fixture
def users() -> list[User]:
    """Users covering regular, inactive and super admin owners."""
    return [
        User(id=7, email="alice@acme.test", role="editor", tenant_id="tenant-1", first_name="Alice", last_name="Ng"),
        User(id=8, email="bob@acme.test", role="editor", tenant_id="tenant-1", is_active=False),
        User(id=42, email="carol@umbrella.test", role="admin", tenant_id="tenant-9"),
        User(id=1, email="root@platform.test", role="admin", tenant_id=None, is_super_admin=True),
        User(id=2, email="ops@platform.test", role="admin", tenant_id="tenant-3", is_super_admin=True),
        User(id=9, email="orphan@platform.test", role="user", tenant_id=None),
    ]


@pytest.fixture
def access_keys() -> list[AccessKey]:
    """Access keys as stored (lower-cased)."""
    return [
        AccessKey(
            id=100,
            user_id=7,
            key="ak_live_7f3c9e",
            key_name="Production sync",
            last_used_at=_ts(3),
        ),
        AccessKey(id=101, user_id=8, key="ak_live_inactive_owner"),
        AccessKey(id=102, user_id=1, key="ak_root_no_tenant"),
        AccessKey(id=103, user_id=2, key="ak_ops_tenant3"),
        AccessKey(id=104, user_id=7, key="ak_live_revoked", is_active=False),
        AccessKey(id=105, user_id=9, key="ak_orphan"),
    ]


@pytest.fixture
def identity_store(tenants, users, access_keys) -> SimpleNamespace:
    """In-memory collaborators seeded with the standard fixtures."""
    user_repo = InMemoryUsers(users)
    return SimpleNamespace(
        tenants=InMemoryTenantDirectory(tenants),
        tenant_api_keys=InMemoryTenantApiKeys({"tn_abc123": "tenant-1", "tn_zen": "tenant-9"}),
        users=user_repo,
        access_keys=InMemoryAccessKeys(user_repo, access_keys),
    )


@pytest.fixture
def ready_gate() -> StoreReadinessGate:
    """A readiness gate that has already opened."""
    return StoreReadinessGate(status=StoreStatus.READY)


@pytest.fixture
def mock_probe() -> MagicMock:
    """A probe that accepts every event."""
    return MagicMock()


@pytest.fixture
def session_verifier() -> SessionTokenVerifier:
    """Verifier for tokens minted by mint_session_token."""
    return SessionTokenVerifier(secret=TEST_SESSION_SECRET, probe=MagicMock())


@pytest.fixture
def mint_session_token():
    """Factory minting HS256 session tokens for a user id."""

    def _mint(
        user_id: int,
        exp_delta: timedelta = timedelta(minutes=15),
        secret: str = TEST_SESSION_SECRET,
    ) -> str:
        payload = {"id": user_id, "exp": datetime.now(UTC) + exp_delta}
        return jwt.encode(payload, secret, algorithm="HS256")

    return _mint
