"""Theme-tenant binding for theme-scoped routes.

A theme may be shared by several tenants. Once a ResolutionContext exists,
the binding resolver checks it against the tenants bound to the route's
theme and settles the active tenant.
"""

from __future__ import annotations

from identity.application.errors import reclassify_unexpected
from identity.application.observability import (
    DefaultThemeBindingProbe,
    ThemeBindingProbe,
)
from identity.domain.aggregates import Tenant
from identity.domain.value_objects import ResolutionContext, ThemeBinding
from identity.ports.exceptions import (
    NoTenantAssociationError,
    ResolutionError,
    TenantNotFoundError,
    TenantThemeMismatchError,
)
from identity.ports.repositories import ITenantRepository


class ThemeTenantBindingResolver:
    """Narrows or validates a resolved context against theme ownership.

    Rules:
    - A non-super-admin user must belong to one of the bound tenants; the
      bound set narrows to exactly that tenant.
    - Without a user, or for a super admin, the already-resolved tenant is
      kept when it is bound to the theme; otherwise the most recently
      created bound tenant becomes active.
    """

    def __init__(
        self,
        tenants: ITenantRepository,
        probe: ThemeBindingProbe | None = None,
    ) -> None:
        self._tenants = tenants
        self._probe = probe or DefaultThemeBindingProbe()

    async def bind(self, context: ResolutionContext, theme_slug: str) -> ThemeBinding:
        """Bind a resolved context to a theme.

        Raises:
            NoTenantAssociationError: Non-super-admin user without a tenant
            TenantThemeMismatchError: User's tenant is not bound to the theme
            TenantNotFoundError: No tenant is bound to the theme
            StoreUnavailableError: The tenants table is missing
            InternalResolutionError: Any other lookup failure
        """
        user = context.user
        if user is not None and not user.is_super_admin and user.tenant_id is None:
            self._probe.user_without_tenant(theme_slug, user.id)
            raise NoTenantAssociationError()

        bound = await self._list_bound(theme_slug)

        if user is not None and not user.is_super_admin:
            match = _find(bound, user.tenant_id)
            if match is None:
                self._probe.theme_mismatch(theme_slug, user.id, str(user.tenant_id))
                raise TenantThemeMismatchError()
            self._probe.theme_bound(theme_slug, match.id, narrowed=True)
            return ThemeBinding(
                context=context.with_tenant(match.id),
                theme_slug=theme_slug,
                tenants=(match,),
            )

        if not bound:
            self._probe.theme_unbound(theme_slug)
            raise TenantNotFoundError("No tenant is bound to this theme")

        current = _find(bound, context.tenant_id)
        if current is not None:
            self._probe.theme_bound(theme_slug, current.id, narrowed=True)
            return ThemeBinding(context=context, theme_slug=theme_slug, tenants=(current,))

        # Newest bound tenant wins when the context names none of them
        default = bound[0]
        self._probe.tenant_switched(theme_slug, context.tenant_id, default.id)
        self._probe.theme_bound(theme_slug, default.id, narrowed=False)
        return ThemeBinding(
            context=context.with_tenant(default.id),
            theme_slug=theme_slug,
            tenants=tuple(bound),
        )

    async def _list_bound(self, theme_slug: str) -> list[Tenant]:
        try:
            return await self._tenants.list_by_theme(theme_slug)
        except ResolutionError:
            raise
        except Exception as e:
            self._probe.lookup_failed(theme_slug, e)
            raise reclassify_unexpected(e) from e


def _find(tenants: list[Tenant], tenant_id: str | None) -> Tenant | None:
    return next((tenant for tenant in tenants if tenant.id == tenant_id), None)
