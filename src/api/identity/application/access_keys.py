"""User access key authentication.

Shared by the resolution cascade and the access key verification endpoint:
both need "raw key in, active owner out" with the same normalization,
inactive-owner handling and usage tracking.
"""

from __future__ import annotations

from identity.application.errors import reclassify_unexpected
from identity.application.observability import (
    DefaultResolutionProbe,
    ResolutionProbe,
)
from identity.application.usage import AccessKeyUsageRecorder
from identity.domain.aggregates import AccessKey, User
from identity.ports.exceptions import (
    InactiveUserError,
    InvalidApiKeyError,
    MissingAccessKeyError,
    ResolutionError,
    StoreUnavailableError,
)
from identity.ports.repositories import IAccessKeyRepository


class AccessKeyAuthenticator:
    """Authenticates a raw access key against its owning user."""

    def __init__(
        self,
        access_keys: IAccessKeyRepository,
        usage_recorder: AccessKeyUsageRecorder | None = None,
        probe: ResolutionProbe | None = None,
    ) -> None:
        self._access_keys = access_keys
        self._usage_recorder = usage_recorder
        self._probe = probe or DefaultResolutionProbe()

    async def authenticate(self, raw_key: str) -> User | None:
        """Look up an active key and return its owner.

        Args:
            raw_key: The key as supplied; trimmed and lower-cased before lookup

        Returns:
            The owning user, or None if no active key matches

        Raises:
            InactiveUserError: If the key is active but its owner is not
        """
        found = await self._match(raw_key)
        return None if found is None else found[1]

    async def verify(self, raw_key: str | None) -> tuple[AccessKey, User]:
        """Verify a user access key on its own, without tenant selection.

        Tenant API keys are not accepted here. The returned key carries
        last_used_at as stored before this verification.

        Raises:
            MissingAccessKeyError: If no key was supplied
            InvalidApiKeyError: If the key is unknown or revoked
            InactiveUserError: If the owner is deactivated
            StoreUnavailableError: If the key tables are missing
            InternalResolutionError: Any other lookup failure
        """
        if raw_key is None or not raw_key.strip():
            raise MissingAccessKeyError()

        try:
            found = await self._match(raw_key)
        except ResolutionError:
            raise
        except Exception as e:
            error = reclassify_unexpected(e)
            if isinstance(error, StoreUnavailableError):
                self._probe.missing_relation_reclassified("access_key_verification")
            else:
                self._probe.unexpected_error("access_key_verification", e)
            raise error from e

        if found is None:
            raise InvalidApiKeyError("Invalid or expired access key")
        return found

    async def _match(self, raw_key: str) -> tuple[AccessKey, User] | None:
        normalized = AccessKey.normalize(raw_key)
        if not normalized:
            return None

        found = await self._access_keys.get_active_with_owner(normalized)
        if found is None:
            return None

        access_key, owner = found
        if not owner.is_active:
            raise InactiveUserError()

        if self._usage_recorder is not None:
            self._usage_recorder.schedule(access_key.id)

        return access_key, owner
