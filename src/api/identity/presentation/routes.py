"""HTTP routes for the identity bounded context.

Exposes the resolved context so clients and operators can see how a
request is bound, plus standalone access key verification.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from identity.application.access_keys import AccessKeyAuthenticator
from identity.application.cascade import ensure_store_ready
from identity.application.observability import ResolutionProbe
from identity.dependencies.resolution import (
    get_access_key_authenticator,
    get_readiness_gate,
    get_resolution_probe,
    resolve_context,
    resolve_theme_context,
)
from identity.domain.value_objects import ResolutionContext, ThemeBinding, UserSummary
from identity.presentation.models import (
    AccessKeyInfoResponse,
    ContextData,
    ContextResponse,
    ErrorResponse,
    ThemeContextData,
    ThemeContextResponse,
    UserSummaryResponse,
    VerifyAccessKeyResponse,
)
from infrastructure.readiness import StoreReadinessGate

_ERROR_RESPONSES = {
    status_code: {"model": ErrorResponse}
    for status_code in (400, 401, 403, 404, 500, 503)
}

router = APIRouter(prefix="/api/v1", tags=["identity"])

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get(
    "/context",
    response_model=ContextResponse,
    response_model_exclude_unset=True,
    responses=_ERROR_RESPONSES,
)
async def get_context(
    context: Annotated[ResolutionContext, Depends(resolve_context)],
) -> ContextResponse:
    """Return the tenant and optional user this request resolves to."""
    return ContextResponse(success=True, data=ContextData.from_domain(context))


@router.get(
    "/theme/{theme_slug}/context",
    response_model=ThemeContextResponse,
    response_model_exclude_unset=True,
    responses=_ERROR_RESPONSES,
)
async def get_theme_context(
    binding: Annotated[ThemeBinding, Depends(resolve_theme_context)],
) -> ThemeContextResponse:
    """Return the context after binding it to a theme."""
    return ThemeContextResponse(
        success=True, data=ThemeContextData.from_binding(binding)
    )


@auth_router.get(
    "/verify-access-key",
    response_model=VerifyAccessKeyResponse,
    response_model_exclude_unset=True,
    responses=_ERROR_RESPONSES,
)
async def verify_access_key(
    gate: Annotated[StoreReadinessGate, Depends(get_readiness_gate)],
    authenticator: Annotated[
        AccessKeyAuthenticator, Depends(get_access_key_authenticator)
    ],
    probe: Annotated[ResolutionProbe, Depends(get_resolution_probe)],
    access_key: Annotated[str | None, Query()] = None,
) -> VerifyAccessKeyResponse:
    """Verify a user access key and return its owner and key details.

    Only user access keys are accepted; tenant API keys are rejected as
    unknown.
    """
    ensure_store_ready(gate, probe)
    key, owner = await authenticator.verify(access_key)
    return VerifyAccessKeyResponse(
        success=True,
        user=UserSummaryResponse.from_domain(UserSummary.from_user(owner)),
        access_key_info=AccessKeyInfoResponse.from_domain(key),
    )
