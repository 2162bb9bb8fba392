"""PostgreSQL implementation of IAccessKeyRepository.

Access keys are stored lower-cased; callers pass the normalized key
(see ``AccessKey.normalize``) so matching is case-insensitive.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from identity.domain.aggregates import AccessKey, User
from identity.infrastructure.models import AccessKeyModel, UserModel
from identity.infrastructure.observability import (
    DefaultKeyRepositoryProbe,
    KeyRepositoryProbe,
)
from identity.infrastructure.user_repository import user_from_model
from identity.ports.repositories import IAccessKeyRepository


class AccessKeyRepository(IAccessKeyRepository):
    """Repository for AccessKey lookups and lifecycle in PostgreSQL.

    Rows are never deleted here. Revocation flips ``is_active`` and the
    usage touch only writes ``last_used_at``.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: KeyRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultKeyRepositoryProbe()

    async def get_active_with_owner(
        self, normalized_key: str
    ) -> tuple[AccessKey, User] | None:
        """Find an active access key joined to its owning user.

        The owner's own is_active flag is returned, not filtered, so the
        caller can tell an unknown key from an inactive owner.

        Args:
            normalized_key: The key after trimming and lower-casing

        Returns:
            (AccessKey, owner) or None if no active key matches
        """
        stmt = (
            select(AccessKeyModel, UserModel)
            .join(UserModel, AccessKeyModel.user_id == UserModel.id)
            .where(
                and_(
                    AccessKeyModel.access_key == normalized_key,
                    AccessKeyModel.is_active.is_(True),
                )
            )
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()

        if row is None:
            self._probe.access_key_not_found()
            return None

        key_model, user_model = row
        self._probe.access_key_matched(key_model.id, user_model.id)
        return self._to_aggregate(key_model), user_from_model(user_model)

    async def touch_last_used(self, access_key_id: int, used_at: datetime) -> None:
        """Set last_used_at on an access key and commit.

        Concurrent touches on the same key are last-writer-wins.
        """
        stmt = (
            update(AccessKeyModel)
            .where(AccessKeyModel.id == access_key_id)
            .values(last_used_at=used_at)
        )
        await self._session.execute(stmt)
        await self._session.commit()
        self._probe.access_key_usage_recorded(access_key_id)

    async def revoke(self, access_key_id: int) -> AccessKey:
        """Deactivate an access key permanently.

        Raises:
            AccessKeyAlreadyRevokedError: If the key is already inactive
            LookupError: If the key does not exist
        """
        stmt = select(AccessKeyModel).where(AccessKeyModel.id == access_key_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            raise LookupError(f"Access key {access_key_id} not found")

        access_key = self._to_aggregate(model)
        access_key.revoke()

        model.is_active = access_key.is_active
        await self._session.flush()

        self._probe.access_key_revoked(access_key_id)
        return access_key

    def _to_aggregate(self, model: AccessKeyModel) -> AccessKey:
        """Convert an AccessKeyModel to an AccessKey domain aggregate."""
        return AccessKey(
            id=model.id,
            user_id=model.user_id,
            key=model.access_key,
            key_name=model.key_name,
            is_active=model.is_active,
            last_used_at=model.last_used_at,
        )
