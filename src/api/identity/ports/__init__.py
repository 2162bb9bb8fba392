"""Ports (collaborator interfaces and failure types) for identity resolution."""

from identity.ports.exceptions import (
    AccessKeyAlreadyRevokedError,
    BadRequestError,
    InactiveUserError,
    InternalResolutionError,
    InvalidApiKeyError,
    MissingAccessKeyError,
    MissingCredentialsError,
    NoTenantAssociationError,
    ResolutionError,
    StoreUnavailableError,
    TenantNotFoundError,
    TenantThemeMismatchError,
    UnauthenticatedError,
    UnauthorizedError,
)
from identity.ports.repositories import (
    IAccessKeyRepository,
    ITenantApiKeyValidator,
    ITenantRepository,
    IUserRepository,
)

__all__ = [
    "AccessKeyAlreadyRevokedError",
    "BadRequestError",
    "IAccessKeyRepository",
    "ITenantApiKeyValidator",
    "ITenantRepository",
    "IUserRepository",
    "InactiveUserError",
    "InternalResolutionError",
    "InvalidApiKeyError",
    "MissingAccessKeyError",
    "MissingCredentialsError",
    "NoTenantAssociationError",
    "ResolutionError",
    "StoreUnavailableError",
    "TenantNotFoundError",
    "TenantThemeMismatchError",
    "UnauthenticatedError",
    "UnauthorizedError",
]
