"""PostgreSQL implementation of ITenantApiKeyValidator.

The resolution layer treats tenant API keys as a black box: a key either
maps to a tenant id or it is invalid. Expired keys are invalid.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from identity.infrastructure.models import TenantApiKeyModel
from identity.infrastructure.observability import (
    DefaultKeyRepositoryProbe,
    KeyRepositoryProbe,
)
from identity.ports.repositories import ITenantApiKeyValidator


class TenantApiKeyRepository(ITenantApiKeyValidator):
    """Validates tenant API keys against the tenant_api_keys table."""

    def __init__(
        self,
        session: AsyncSession,
        probe: KeyRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultKeyRepositoryProbe()

    async def validate(self, api_key: str) -> str | None:
        """Validate a tenant API key.

        Matching is exact; tenant keys are not case-folded.

        Args:
            api_key: The raw key as supplied

        Returns:
            The bound tenant id, or None if the key is unknown or expired
        """
        now = datetime.now(UTC)
        stmt = select(TenantApiKeyModel.tenant_id).where(
            and_(
                TenantApiKeyModel.api_key == api_key,
                or_(
                    TenantApiKeyModel.expires_at.is_(None),
                    TenantApiKeyModel.expires_at > now,
                ),
            )
        )
        result = await self._session.execute(stmt)
        tenant_id = result.scalar_one_or_none()

        if tenant_id is None:
            self._probe.tenant_api_key_rejected()
            return None

        self._probe.tenant_api_key_matched(tenant_id)
        return tenant_id
