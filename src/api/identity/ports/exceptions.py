"""Resolution failure taxonomy for the identity bounded context.

Every way tenant and identity resolution can fail is represented by one
exception class. Each carries the HTTP status, a stable machine-readable
code and a caller-safe message; the presentation layer renders them as
``{"success": false, "error": message, "code": code}``.

Store-level error text never reaches these messages.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for all tenant/identity resolution failures."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"
    retryable: bool = False

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class StoreUnavailableError(ResolutionError):
    """The backing store is not ready yet, or failed to start.

    Retryable after a delay. ``code`` distinguishes an initializing store
    from one whose startup sequence failed.
    """

    status_code = 503
    code = "STORE_UNAVAILABLE"
    default_message = "Database is unavailable"
    retryable = True

    @classmethod
    def initializing(cls) -> StoreUnavailableError:
        """Build the error returned while the store is still starting up."""
        return cls(
            message="Database is initializing, please retry shortly",
            code="STORE_INITIALIZING",
        )

    @classmethod
    def failed(cls) -> StoreUnavailableError:
        """Build the error returned after the startup sequence gave up."""
        return cls(
            message="Database initialization failed",
            code="STORE_UNAVAILABLE",
        )


class BadRequestError(ResolutionError):
    """The request is malformed. Not retryable as sent."""

    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class MissingAccessKeyError(BadRequestError):
    """The access key verification endpoint was called without a key."""

    code = "MISSING_ACCESS_KEY"
    default_message = "Access key is required"


class UnauthenticatedError(ResolutionError):
    """Missing or invalid credential. Not retryable without a new credential."""

    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Authentication required"


class MissingCredentialsError(UnauthenticatedError):
    """Neither an API key nor a tenant id was supplied."""

    code = "MISSING_AUTH"
    default_message = "API key or tenant id is required"


class InvalidApiKeyError(UnauthenticatedError):
    """The key matched neither a tenant API key nor a user access key.

    The message does not say which namespace was tried.
    """

    code = "INVALID_API_KEY"
    default_message = "Invalid or unknown API key"


class InactiveUserError(UnauthenticatedError):
    """The access key is valid but its owner is deactivated."""

    code = "USER_INACTIVE"
    default_message = "User account is not active"


class UnauthorizedError(ResolutionError):
    """The resolved identity may not act on the requested tenant."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class TenantThemeMismatchError(UnauthorizedError):
    """The user's tenant is not bound to the requested theme."""

    code = "TENANT_THEME_MISMATCH"
    default_message = "Tenant does not match the requested theme"


class NoTenantAssociationError(UnauthorizedError):
    """A non-super-admin user has no tenant assigned."""

    code = "NO_TENANT"
    default_message = "No tenant associated with this user"


class TenantNotFoundError(ResolutionError):
    """The tenant id (or theme binding) does not resolve to any tenant."""

    status_code = 404
    code = "TENANT_NOT_FOUND"
    default_message = "Tenant not found"


class InternalResolutionError(ResolutionError):
    """An unexpected collaborator failure. Details are logged, never returned."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


class AccessKeyAlreadyRevokedError(Exception):
    """Raised when revoking an access key that is already inactive.

    Revocation is terminal; there is no way back to active through this layer.
    """

    pass
