"""Domain probes for identity repository operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events related to tenant, user and key lookups.
Key material is never passed to a probe.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant directory lookups."""

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant id did not resolve."""
        ...

    def theme_tenants_listed(self, theme_slug: str, count: int) -> None:
        """Record how many tenants are bound to a theme."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRepositoryProbe:
    """Default implementation of TenantRepositoryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        self._logger.debug(
            "tenant_retrieved",
            lookup_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant id did not resolve."""
        self._logger.debug(
            "tenant_not_found",
            lookup_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def theme_tenants_listed(self, theme_slug: str, count: int) -> None:
        """Record how many tenants are bound to a theme."""
        self._logger.debug(
            "theme_tenants_listed",
            theme_slug=theme_slug,
            count=count,
            **self._get_context_kwargs(),
        )


class KeyRepositoryProbe(Protocol):
    """Domain probe for tenant API key and user access key lookups."""

    def tenant_api_key_matched(self, tenant_id: str) -> None:
        """Record that a tenant API key resolved to a tenant."""
        ...

    def tenant_api_key_rejected(self) -> None:
        """Record that a key is not a valid tenant API key."""
        ...

    def access_key_matched(self, access_key_id: int, user_id: int) -> None:
        """Record that an active access key was found."""
        ...

    def access_key_not_found(self) -> None:
        """Record that no active access key matched."""
        ...

    def access_key_usage_recorded(self, access_key_id: int) -> None:
        """Record that last_used_at was updated."""
        ...

    def access_key_revoked(self, access_key_id: int) -> None:
        """Record that an access key was revoked."""
        ...

    def user_not_found(self, user_id: int) -> None:
        """Record that a user id did not resolve."""
        ...

    def with_context(self, context: ObservationContext) -> KeyRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultKeyRepositoryProbe:
    """Default implementation of KeyRepositoryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultKeyRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultKeyRepositoryProbe(logger=self._logger, context=context)

    def tenant_api_key_matched(self, tenant_id: str) -> None:
        """Record that a tenant API key resolved to a tenant."""
        self._logger.debug(
            "tenant_api_key_matched",
            resolved_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_api_key_rejected(self) -> None:
        """Record that a key is not a valid tenant API key."""
        self._logger.debug(
            "tenant_api_key_rejected",
            **self._get_context_kwargs(),
        )

    def access_key_matched(self, access_key_id: int, user_id: int) -> None:
        """Record that an active access key was found."""
        self._logger.debug(
            "access_key_matched",
            access_key_id=access_key_id,
            owner_id=user_id,
            **self._get_context_kwargs(),
        )

    def access_key_not_found(self) -> None:
        """Record that no active access key matched."""
        self._logger.debug(
            "access_key_not_found",
            **self._get_context_kwargs(),
        )

    def access_key_usage_recorded(self, access_key_id: int) -> None:
        """Record that last_used_at was updated."""
        self._logger.debug(
            "access_key_usage_recorded",
            access_key_id=access_key_id,
            **self._get_context_kwargs(),
        )

    def access_key_revoked(self, access_key_id: int) -> None:
        """Record that an access key was revoked."""
        self._logger.info(
            "access_key_revoked",
            access_key_id=access_key_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: int) -> None:
        """Record that a user id did not resolve."""
        self._logger.debug(
            "user_not_found",
            lookup_user_id=user_id,
            **self._get_context_kwargs(),
        )
