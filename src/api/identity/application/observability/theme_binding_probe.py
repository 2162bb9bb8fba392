"""Protocol for theme-tenant binding observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ThemeBindingProbe(Protocol):
    """Domain probe for theme-scoped tenant binding."""

    def theme_bound(self, theme_slug: str, tenant_id: str, narrowed: bool) -> None:
        """Record that a theme route was bound to a tenant."""
        ...

    def theme_mismatch(self, theme_slug: str, user_id: int, tenant_id: str) -> None:
        """Record a user whose tenant is not bound to the theme."""
        ...

    def user_without_tenant(self, theme_slug: str, user_id: int) -> None:
        """Record a non-super-admin user with no tenant."""
        ...

    def tenant_switched(
        self, theme_slug: str, from_tenant_id: str, to_tenant_id: str
    ) -> None:
        """Record a resolved tenant replaced by the theme's default tenant."""
        ...

    def theme_unbound(self, theme_slug: str) -> None:
        """Record a theme with no bound tenants."""
        ...

    def lookup_failed(self, theme_slug: str, error: Exception) -> None:
        """Record an unexpected failure listing bound tenants."""
        ...

    def with_context(self, context: ObservationContext) -> ThemeBindingProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultThemeBindingProbe:
    """Default implementation of ThemeBindingProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultThemeBindingProbe:
        """Create a new probe with observation context bound."""
        return DefaultThemeBindingProbe(logger=self._logger, context=context)

    def theme_bound(self, theme_slug: str, tenant_id: str, narrowed: bool) -> None:
        self._logger.info(
            "theme_bound",
            theme_slug=theme_slug,
            bound_tenant_id=tenant_id,
            narrowed=narrowed,
            **self._get_context_kwargs(),
        )

    def theme_mismatch(self, theme_slug: str, user_id: int, tenant_id: str) -> None:
        self._logger.warning(
            "theme_mismatch",
            theme_slug=theme_slug,
            resolved_user_id=user_id,
            user_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_without_tenant(self, theme_slug: str, user_id: int) -> None:
        self._logger.error(
            "user_without_tenant",
            theme_slug=theme_slug,
            resolved_user_id=user_id,
            **self._get_context_kwargs(),
        )

    def tenant_switched(
        self, theme_slug: str, from_tenant_id: str, to_tenant_id: str
    ) -> None:
        self._logger.warning(
            "theme_tenant_switched",
            theme_slug=theme_slug,
            from_tenant_id=from_tenant_id,
            to_tenant_id=to_tenant_id,
            **self._get_context_kwargs(),
        )

    def theme_unbound(self, theme_slug: str) -> None:
        self._logger.warning(
            "theme_unbound",
            theme_slug=theme_slug,
            **self._get_context_kwargs(),
        )

    def lookup_failed(self, theme_slug: str, error: Exception) -> None:
        self._logger.error(
            "theme_lookup_failed",
            theme_slug=theme_slug,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
