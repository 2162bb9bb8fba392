"""Authentication shared kernel module."""

from shared_kernel.auth.observability import (
    DefaultSessionTokenProbe,
    SessionTokenProbe,
)
from shared_kernel.auth.session_token import (
    InvalidTokenError,
    SessionTokenClaims,
    SessionTokenVerifier,
)

__all__ = [
    "DefaultSessionTokenProbe",
    "InvalidTokenError",
    "SessionTokenClaims",
    "SessionTokenProbe",
    "SessionTokenVerifier",
]
