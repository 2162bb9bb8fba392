"""Pydantic models for resolution API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from identity.domain.aggregates import AccessKey
from identity.domain.value_objects import ResolutionContext, ThemeBinding, UserSummary


class UserSummaryResponse(BaseModel):
    """Response model for the resolved user."""

    id: int = Field(..., description="User ID")
    first_name: str | None = Field(None, description="First name")
    last_name: str | None = Field(None, description="Last name")
    email: str = Field(..., description="Email address")
    role: str = Field(..., description="User role")
    tenant_id: str | None = Field(None, description="Home tenant (null for some super admins)")
    is_super_admin: bool = Field(..., description="Whether the user may select tenants")

    @classmethod
    def from_domain(cls, summary: UserSummary) -> UserSummaryResponse:
        """Convert a UserSummary value object to an API response."""
        return cls(**summary.as_dict())


class ContextData(BaseModel):
    """Resolution Context wire shape: ``{tenantId, user?}``."""

    model_config = ConfigDict(populate_by_name=True)

    tenant_id: str = Field(..., alias="tenantId", description="Active tenant ID")
    user: UserSummaryResponse | None = Field(None, description="Authenticated user")

    @classmethod
    def from_domain(cls, context: ResolutionContext) -> ContextData:
        """Convert a ResolutionContext to an API response.

        ``user`` is only set when present so it is omitted from the body
        when responses exclude unset fields.
        """
        if context.user is None:
            return cls(tenant_id=context.tenant_id)
        return cls(
            tenant_id=context.tenant_id,
            user=UserSummaryResponse.from_domain(context.user),
        )


class ThemeContextData(ContextData):
    """Resolution Context after theme binding."""

    theme_slug: str = Field(..., alias="themeSlug", description="Theme slug")
    tenants: list[str] = Field(..., description="Bound tenant IDs after narrowing")

    @classmethod
    def from_binding(cls, binding: ThemeBinding) -> ThemeContextData:
        """Convert a ThemeBinding to an API response."""
        extra = {}
        if binding.context.user is not None:
            extra["user"] = UserSummaryResponse.from_domain(binding.context.user)
        return cls(
            tenant_id=binding.context.tenant_id,
            theme_slug=binding.theme_slug,
            tenants=[tenant.id for tenant in binding.tenants],
            **extra,
        )


class ContextResponse(BaseModel):
    """Success envelope for a resolved context."""

    success: Literal[True] = True
    data: ContextData


class ThemeContextResponse(BaseModel):
    """Success envelope for a theme-bound context."""

    success: Literal[True] = True
    data: ThemeContextData


class AccessKeyInfoResponse(BaseModel):
    """Response model for the verified access key."""

    key_name: str | None = Field(None, description="Label given to the key")
    last_used_at: datetime | None = Field(
        None, description="Previous use of the key, before this verification"
    )

    @classmethod
    def from_domain(cls, access_key: AccessKey) -> AccessKeyInfoResponse:
        """Convert an AccessKey aggregate to an API response."""
        return cls(key_name=access_key.key_name, last_used_at=access_key.last_used_at)


class VerifyAccessKeyResponse(BaseModel):
    """Success envelope for access key verification."""

    success: Literal[True] = True
    user: UserSummaryResponse
    access_key_info: AccessKeyInfoResponse


class ErrorResponse(BaseModel):
    """Failure envelope for every resolution error."""

    success: Literal[False] = False
    error: str = Field(..., description="Caller-safe error message")
    code: str | None = Field(None, description="Stable machine-readable error code")

