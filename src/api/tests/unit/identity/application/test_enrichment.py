"""Unit tests for SessionTokenEnricher."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from identity.application.credentials import (
    ApiKeyCandidate,
    Credentials,
    StructuredTokenCandidate,
)
from identity.application.enrichment import SessionTokenEnricher
from identity.domain.value_objects import (
    ResolutionContext,
    ResolutionSource,
    UserSummary,
)


@pytest.fixture
def enricher(session_verifier, identity_store, mock_probe) -> SessionTokenEnricher:
    return SessionTokenEnricher(session_verifier, identity_store.users, probe=mock_probe)


@pytest.fixture
def tenant_context() -> ResolutionContext:
    return ResolutionContext(tenant_id="tenant-9", source=ResolutionSource.TENANT_ID)


def with_token(token: str) -> Credentials:
    return Credentials(bearer=StructuredTokenCandidate(token))


class TestEnrich:
    """Tests for SessionTokenEnricher.enrich."""

    @pytest.mark.asyncio
    async def test_valid_token_attaches_subject(
        self, enricher, tenant_context, mint_session_token, mock_probe
    ):
        """The subject user is attached; the tenant stays."""
        result = await enricher.enrich(tenant_context, with_token(mint_session_token(42)))

        assert result.tenant_id == "tenant-9"
        assert result.user.id == 42
        assert result.user.email == "carol@umbrella.test"
        mock_probe.session_user_attached.assert_called_once_with("tenant-9", 42)

    @pytest.mark.asyncio
    async def test_existing_user_is_kept(self, enricher, mint_session_token, users):
        """A context that already has a user is returned untouched."""
        context = ResolutionContext(
            tenant_id="tenant-1",
            source=ResolutionSource.USER_ACCESS_KEY,
            user=UserSummary.from_user(users[0]),
        )

        result = await enricher.enrich(context, with_token(mint_session_token(42)))

        assert result is context

    @pytest.mark.asyncio
    async def test_no_structured_token_is_a_no_op(self, enricher, tenant_context):
        """An API-key-shaped bearer is not a session token."""
        result = await enricher.enrich(
            tenant_context, Credentials(bearer=ApiKeyCandidate("ak_live_7f3c9e"))
        )
        assert result is tenant_context

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("token_kwargs", "reason"),
        [
            ({"exp_delta": timedelta(minutes=-1)}, "invalid_token"),
            ({"secret": "forged"}, "invalid_token"),
        ],
    )
    async def test_invalid_tokens_are_swallowed(
        self, enricher, tenant_context, mint_session_token, mock_probe, token_kwargs, reason
    ):
        """Verification failures leave the context as it was."""
        token = mint_session_token(42, **token_kwargs)

        result = await enricher.enrich(tenant_context, with_token(token))

        assert result is tenant_context
        mock_probe.session_enrichment_skipped.assert_called_once_with(reason)

    @pytest.mark.asyncio
    async def test_malformed_token_is_swallowed(self, enricher, tenant_context):
        """Three dot-separated parts of garbage do not fail the request."""
        result = await enricher.enrich(tenant_context, with_token("aaa.bbb.ccc"))
        assert result is tenant_context

    @pytest.mark.asyncio
    async def test_unknown_subject_is_swallowed(
        self, enricher, tenant_context, mint_session_token, mock_probe
    ):
        """A token for a user that no longer exists adds nothing."""
        result = await enricher.enrich(tenant_context, with_token(mint_session_token(999)))

        assert result is tenant_context
        mock_probe.session_enrichment_skipped.assert_called_once_with("unknown_subject")

    @pytest.mark.asyncio
    async def test_inactive_subject_is_swallowed(
        self, enricher, tenant_context, mint_session_token, mock_probe
    ):
        """Deactivated users are not attached."""
        result = await enricher.enrich(tenant_context, with_token(mint_session_token(8)))

        assert result is tenant_context
        mock_probe.session_enrichment_skipped.assert_called_once_with("inactive_subject")

    @pytest.mark.asyncio
    async def test_non_numeric_subject_is_swallowed(
        self, tenant_context, identity_store, mock_probe
    ):
        """User ids are integers; anything else is skipped."""
        verifier = MagicMock()
        verifier.verify.return_value = MagicMock(subject="user-abc")
        enricher = SessionTokenEnricher(verifier, identity_store.users, probe=mock_probe)

        result = await enricher.enrich(tenant_context, with_token("a.b.c"))

        assert result is tenant_context
        mock_probe.session_enrichment_skipped.assert_called_once_with("malformed_subject")

    @pytest.mark.asyncio
    async def test_lookup_failure_is_swallowed(
        self, session_verifier, tenant_context, mint_session_token, mock_probe
    ):
        """Even a store error during lookup never fails the request."""
        users = MagicMock()
        users.get_by_id = AsyncMock(side_effect=RuntimeError("connection reset"))
        enricher = SessionTokenEnricher(session_verifier, users, probe=mock_probe)

        result = await enricher.enrich(tenant_context, with_token(mint_session_token(42)))

        assert result is tenant_context
        mock_probe.unexpected_error.assert_called_once()
