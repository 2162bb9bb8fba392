"""PostgreSQL implementation of ITenantRepository.

Read-only access to the tenant directory. Tenants are created and
edited by administrative flows outside the resolution layer.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from identity.domain.aggregates import Tenant
from identity.infrastructure.models import TenantModel
from identity.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from identity.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository for Tenant lookups against PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def get_by_id(self, tenant_id: str) -> Tenant | None:
        """Retrieve a tenant by its id.

        Args:
            tenant_id: The raw tenant id supplied by the caller

        Returns:
            The Tenant aggregate, or None if not found
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found(tenant_id)
            return None

        self._probe.tenant_retrieved(model.id)
        return self._to_aggregate(model)

    async def list_by_theme(self, theme_slug: str) -> list[Tenant]:
        """List tenants bound to a theme, newest first.

        Ties on created_at are broken by id so the order is stable.
        """
        stmt = (
            select(TenantModel)
            .where(TenantModel.theme_id == theme_slug)
            .order_by(TenantModel.created_at.desc(), TenantModel.id)
        )
        result = await self._session.execute(stmt)
        tenants = [self._to_aggregate(model) for model in result.scalars().all()]

        self._probe.theme_tenants_listed(theme_slug, len(tenants))
        return tenants

    def _to_aggregate(self, model: TenantModel) -> Tenant:
        """Convert a TenantModel to a Tenant domain aggregate."""
        return Tenant(
            id=model.id,
            name=model.name,
            slug=model.slug,
            theme_id=model.theme_id,
            created_at=model.created_at,
        )
