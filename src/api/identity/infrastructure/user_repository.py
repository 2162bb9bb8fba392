"""PostgreSQL implementation of IUserRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from identity.domain.aggregates import User
from identity.infrastructure.models import UserModel
from identity.infrastructure.observability import (
    DefaultKeyRepositoryProbe,
    KeyRepositoryProbe,
)
from identity.ports.repositories import IUserRepository


def user_from_model(model: UserModel) -> User:
    """Convert a UserModel to a User domain aggregate."""
    return User(
        id=model.id,
        email=model.email,
        role=model.role,
        tenant_id=model.tenant_id,
        first_name=model.first_name,
        last_name=model.last_name,
        is_super_admin=model.is_super_admin,
        is_active=model.is_active,
    )


class UserRepository(IUserRepository):
    """Repository for User lookups against PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: KeyRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultKeyRepositoryProbe()

    async def get_by_id(self, user_id: int) -> User | None:
        """Retrieve a user by id, or None if not found."""
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(user_id)
            return None

        return user_from_model(model)
