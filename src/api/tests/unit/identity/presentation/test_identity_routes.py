"""Unit tests for the identity HTTP routes.

The app is assembled with in-memory collaborators through dependency
overrides; error rendering uses the application's exception handler.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from identity.application.access_keys import AccessKeyAuthenticator
from identity.application.cascade import ResolutionCascade
from identity.application.enrichment import SessionTokenEnricher
from identity.application.strategies import (
    TenantApiKeyStrategy,
    TenantIdFallbackStrategy,
    UserAccessKeyStrategy,
)
from identity.application.theme_binding import ThemeTenantBindingResolver
from identity.dependencies.resolution import (
    get_access_key_authenticator,
    get_resolution_cascade,
    get_theme_binding_resolver,
)
from identity.ports.exceptions import ResolutionError
from identity.presentation import auth_router, router
from infrastructure.readiness import StoreReadinessGate, StoreStatus
from main import resolution_error_handler


@pytest.fixture
def gate() -> StoreReadinessGate:
    return StoreReadinessGate(status=StoreStatus.READY)


@pytest.fixture
def app(gate, identity_store, session_verifier, mock_probe) -> FastAPI:
    """App with both routers wired to in-memory collaborators."""
    authenticator = AccessKeyAuthenticator(identity_store.access_keys, probe=mock_probe)
    cascade = ResolutionCascade(
        gate=gate,
        key_strategies=[
            TenantApiKeyStrategy(identity_store.tenant_api_keys),
            UserAccessKeyStrategy(authenticator),
        ],
        fallback=TenantIdFallbackStrategy(identity_store.tenants),
        enricher=SessionTokenEnricher(session_verifier, identity_store.users, probe=mock_probe),
        probe=mock_probe,
    )
    resolver = ThemeTenantBindingResolver(identity_store.tenants, probe=MagicMock())

    test_app = FastAPI()
    test_app.add_exception_handler(ResolutionError, resolution_error_handler)
    test_app.include_router(router)
    test_app.include_router(auth_router)
    test_app.state.readiness_gate = gate

    test_app.dependency_overrides[get_resolution_cascade] = lambda: cascade
    test_app.dependency_overrides[get_theme_binding_resolver] = lambda: resolver
    test_app.dependency_overrides[get_access_key_authenticator] = lambda: authenticator
    return test_app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestGetContext:
    """Tests for GET /api/v1/context."""

    def test_tenant_api_key(self, client):
        response = client.get("/api/v1/context", headers={"x-api-key": "tn_abc123"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"tenantId": "tenant-1"}}

    def test_access_key_includes_user(self, client):
        """Scenario: an access key as bearer resolves the owner's tenant."""
        response = client.get(
            "/api/v1/context", headers={"Authorization": "Bearer AK_LIVE_7F3C9E"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tenantId"] == "tenant-1"
        assert data["user"] == {
            "id": 7,
            "first_name": "Alice",
            "last_name": "Ng",
            "email": "alice@acme.test",
            "role": "editor",
            "tenant_id": "tenant-1",
            "is_super_admin": False,
        }

    def test_tenant_id_query_without_user_omits_user(self, client):
        response = client.get("/api/v1/context", params={"tenantId": "tenant-3"})

        assert response.status_code == 200
        assert response.json()["data"] == {"tenantId": "tenant-3"}

    def test_missing_credentials(self, client):
        response = client.get("/api/v1/context")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "API key or tenant id is required",
            "code": "MISSING_AUTH",
        }

    def test_unknown_key(self, client):
        response = client.get("/api/v1/context", headers={"x-api-key": "nope"})

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_API_KEY"

    def test_inactive_owner(self, client):
        response = client.get(
            "/api/v1/context", headers={"x-api-key": "ak_live_inactive_owner"}
        )

        assert response.status_code == 401
        assert response.json()["code"] == "USER_INACTIVE"

    def test_unknown_tenant(self, client):
        response = client.get("/api/v1/context", headers={"x-tenant-id": "tenant-x"})

        assert response.status_code == 404
        assert response.json()["code"] == "TENANT_NOT_FOUND"

    def test_session_token_enriches_tenant_id_context(self, client, mint_session_token):
        response = client.get(
            "/api/v1/context",
            headers={
                "x-tenant-id": "tenant-1",
                "Authorization": f"Bearer {mint_session_token(7)}",
            },
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == 7

    def test_initializing_store_returns_503_with_retry_after(self, client, gate):
        gate._status = StoreStatus.INITIALIZING

        response = client.get("/api/v1/context", headers={"x-api-key": "tn_abc123"})

        assert response.status_code == 503
        assert response.json()["code"] == "STORE_INITIALIZING"
        assert int(response.headers["Retry-After"]) >= 1

    def test_failed_store_returns_503(self, client, gate):
        gate._status = StoreStatus.FAILED

        response = client.get("/api/v1/context", headers={"x-api-key": "tn_abc123"})

        assert response.status_code == 503
        assert response.json()["code"] == "STORE_UNAVAILABLE"


class TestGetThemeContext:
    """Tests for GET /api/v1/theme/{theme_slug}/context."""

    def test_regular_user_narrows_to_own_tenant(self, client):
        response = client.get(
            "/api/v1/theme/aurora/context", headers={"x-api-key": "ak_live_7f3c9e"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tenantId"] == "tenant-1"
        assert data["themeSlug"] == "aurora"
        assert data["tenants"] == ["tenant-1"]

    def test_unbound_tenant_defaults_to_newest(self, client):
        response = client.get(
            "/api/v1/theme/aurora/context", headers={"x-tenant-id": "tenant-3"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tenantId"] == "tenant-2"
        assert data["tenants"] == ["tenant-2", "tenant-1"]
        assert "user" not in data

    def test_user_from_other_theme_is_forbidden(self, client, mint_session_token):
        response = client.get(
            "/api/v1/theme/aurora/context",
            headers={
                "x-tenant-id": "tenant-9",
                "Authorization": f"Bearer {mint_session_token(42)}",
            },
        )

        assert response.status_code == 403
        assert response.json()["code"] == "TENANT_THEME_MISMATCH"

    def test_theme_without_tenants(self, client):
        response = client.get(
            "/api/v1/theme/empty/context", headers={"x-api-key": "tn_abc123"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "No tenant is bound to this theme"


class TestVerifyAccessKey:
    """Tests for GET /api/auth/verify-access-key."""

    def test_valid_key_returns_owner(self, client):
        response = client.get(
            "/api/auth/verify-access-key", params={"access_key": " AK_LIVE_7F3C9E "}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["email"] == "alice@acme.test"
        assert body["user"]["tenant_id"] == "tenant-1"
        assert body["access_key_info"] == {
            "key_name": "Production sync",
            "last_used_at": "2024-03-01T00:00:00Z",
        }

    def test_key_without_name_or_usage_reports_nulls(self, client):
        response = client.get(
            "/api/auth/verify-access-key", params={"access_key": "ak_root_no_tenant"}
        )

        assert response.status_code == 200
        assert response.json()["access_key_info"] == {
            "key_name": None,
            "last_used_at": None,
        }

    def test_super_admin_without_tenant_is_valid(self, client):
        response = client.get(
            "/api/auth/verify-access-key", params={"access_key": "ak_root_no_tenant"}
        )

        assert response.status_code == 200
        assert response.json()["user"]["tenant_id"] is None

    def test_missing_key(self, client):
        response = client.get("/api/auth/verify-access-key")

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_ACCESS_KEY"

    def test_unknown_key(self, client):
        response = client.get(
            "/api/auth/verify-access-key", params={"access_key": "tn_abc123"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired access key"

    def test_revoked_key(self, client):
        response = client.get(
            "/api/auth/verify-access-key", params={"access_key": "AK_LIVE_REVOKED"}
        )

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Invalid or expired access key"
        assert "user" not in body

    def test_inactive_owner(self, client):
        response = client.get(
            "/api/auth/verify-access-key",
            params={"access_key": "ak_live_inactive_owner"},
        )

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "USER_INACTIVE"
        assert "user" not in body

    def test_gated_by_store_readiness(self, client, gate):
        gate._status = StoreStatus.INITIALIZING

        response = client.get(
            "/api/auth/verify-access-key", params={"access_key": "ak_live_7f3c9e"}
        )

        assert response.status_code == 503
        assert "Retry-After" in response.headers
