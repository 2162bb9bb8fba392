"""Unit tests for AccessKeyAuthenticator."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import ProgrammingError

from identity.application.access_keys import AccessKeyAuthenticator
from identity.ports.exceptions import (
    InactiveUserError,
    InternalResolutionError,
    InvalidApiKeyError,
    MissingAccessKeyError,
    StoreUnavailableError,
)


@pytest.fixture
def recorder():
    return MagicMock()


@pytest.fixture
def authenticator(identity_store, recorder, mock_probe) -> AccessKeyAuthenticator:
    return AccessKeyAuthenticator(
        identity_store.access_keys, usage_recorder=recorder, probe=mock_probe
    )


class TestAuthenticate:
    """Tests for authenticate()."""

    @pytest.mark.asyncio
    async def test_normalizes_before_lookup(self, identity_store, recorder):
        """Keys are trimmed and lower-cased."""
        repository = MagicMock()
        repository.get_active_with_owner = AsyncMock(return_value=None)
        authenticator = AccessKeyAuthenticator(repository, usage_recorder=recorder)

        await authenticator.authenticate("  AK_Live_7F3C9E ")

        repository.get_active_with_owner.assert_awaited_once_with("ak_live_7f3c9e")

    @pytest.mark.asyncio
    async def test_returns_owner_and_schedules_usage(self, authenticator, recorder):
        """A good key returns its owner and records usage."""
        owner = await authenticator.authenticate("ak_live_7f3c9e")

        assert owner.id == 7
        recorder.schedule.assert_called_once_with(100)

    @pytest.mark.asyncio
    async def test_unknown_key_returns_none(self, authenticator, recorder):
        """Unknown keys are not errors here."""
        assert await authenticator.authenticate("ak_missing") is None
        recorder.schedule.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_owner_raises_without_usage(self, authenticator, recorder):
        """Usage is only recorded for successful authentication."""
        with pytest.raises(InactiveUserError):
            await authenticator.authenticate("ak_live_inactive_owner")
        recorder.schedule.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_key_skips_lookup(self):
        """Whitespace is not a key."""
        repository = MagicMock()
        repository.get_active_with_owner = AsyncMock()
        authenticator = AccessKeyAuthenticator(repository)

        assert await authenticator.authenticate("   ") is None
        repository.get_active_with_owner.assert_not_called()


class TestVerify:
    """Tests for verify(), used by the access key verification endpoint."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [None, "", "  "])
    async def test_missing_key_is_bad_request(self, authenticator, raw):
        """The key parameter is required."""
        with pytest.raises(MissingAccessKeyError) as exc_info:
            await authenticator.verify(raw)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_key(self, authenticator):
        """Unknown or revoked keys share one message."""
        with pytest.raises(InvalidApiKeyError) as exc_info:
            await authenticator.verify("ak_live_revoked")
        assert exc_info.value.message == "Invalid or expired access key"

    @pytest.mark.asyncio
    async def test_tenant_api_keys_are_not_accepted(self, authenticator):
        """Only the user access key namespace is checked."""
        with pytest.raises(InvalidApiKeyError):
            await authenticator.verify("tn_abc123")

    @pytest.mark.asyncio
    async def test_super_admin_without_tenant_is_valid(self, authenticator):
        """Verification does not select a tenant."""
        _, owner = await authenticator.verify("AK_ROOT_NO_TENANT")
        assert owner.is_super_admin is True
        assert owner.tenant_id is None

    @pytest.mark.asyncio
    async def test_returns_key_with_previous_usage(self, authenticator, recorder):
        """The key is reported as stored, before this use is recorded."""
        key, owner = await authenticator.verify("ak_live_7f3c9e")

        assert owner.id == 7
        assert key.id == 100
        assert key.key_name == "Production sync"
        assert key.last_used_at == datetime(2024, 3, 1, tzinfo=UTC)
        recorder.schedule.assert_called_once_with(100)

    @pytest.mark.asyncio
    async def test_inactive_owner_is_rejected(self, authenticator, recorder):
        with pytest.raises(InactiveUserError):
            await authenticator.verify("ak_live_inactive_owner")
        recorder.schedule.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_relation_is_retryable(self, mock_probe):
        """Startup race errors map to STORE_INITIALIZING."""
        repository = MagicMock()
        repository.get_active_with_owner = AsyncMock(
            side_effect=Exception('relation "user_access_keys" does not exist')
        )
        authenticator = AccessKeyAuthenticator(repository, probe=mock_probe)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await authenticator.verify("ak_live_7f3c9e")
        assert exc_info.value.code == "STORE_INITIALIZING"

    @pytest.mark.asyncio
    async def test_missing_relation_is_logged_as_reclassified(self, mock_probe):
        """A startup race is a warning, not an unexpected error."""
        repository = MagicMock()
        repository.get_active_with_owner = AsyncMock(
            side_effect=ProgrammingError(
                "SELECT ...",
                {},
                Exception('relation "user_access_keys" does not exist'),
            )
        )
        authenticator = AccessKeyAuthenticator(repository, probe=mock_probe)

        with pytest.raises(StoreUnavailableError):
            await authenticator.verify("ak_live_7f3c9e")

        mock_probe.missing_relation_reclassified.assert_called_once_with(
            "access_key_verification"
        )
        mock_probe.unexpected_error.assert_not_called()

    @pytest.mark.asyncio
    async def test_other_errors_are_internal(self, mock_probe):
        """Unexpected errors are logged and made generic."""
        repository = MagicMock()
        repository.get_active_with_owner = AsyncMock(side_effect=OSError("boom"))
        authenticator = AccessKeyAuthenticator(repository, probe=mock_probe)

        with pytest.raises(InternalResolutionError):
            await authenticator.verify("ak_live_7f3c9e")
        mock_probe.unexpected_error.assert_called_once()
        mock_probe.missing_relation_reclassified.assert_not_called()
