"""Session token verification.

Session tokens are short-lived HMAC-signed JWTs issued at login. They are
verified statelessly: signature and expiry only, no store round-trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import SessionTokenProbe

# Tokens minted by the login flow carry the user id in ``id``; standard
# issuers use ``sub``.
SUBJECT_CLAIMS = ("sub", "id")


@dataclass(frozen=True)
class SessionTokenClaims:
    """Verified session token claims."""

    subject: str
    raw_claims: dict[str, Any]


class InvalidTokenError(Exception):
    """Raised when session token verification fails."""

    pass


class SessionTokenVerifier:
    """Verifies signed session tokens with a shared secret."""

    def __init__(
        self,
        secret: str,
        probe: SessionTokenProbe,
        algorithm: str = "HS256",
        leeway: timedelta = timedelta(seconds=0),
    ):
        """Initialize the verifier.

        Args:
            secret: Shared HMAC secret.
            probe: Observability probe for logging events.
            algorithm: Expected signing algorithm (default: HS256).
            leeway: Clock skew tolerated when checking expiry.
        """
        if not secret:
            raise ValueError("Session token secret must not be empty")

        self._secret = secret
        self._probe = probe
        self._algorithm = algorithm
        self._leeway = leeway

    def verify(self, token: str) -> SessionTokenClaims:
        """Verify a token's signature and expiry and return its subject.

        Args:
            token: The raw bearer token.

        Returns:
            SessionTokenClaims with the subject user id.

        Raises:
            InvalidTokenError: If the token is malformed, expired, badly
                signed, or carries no subject.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": False,
                    "require_exp": True,
                    "leeway": int(self._leeway.total_seconds()),
                },
            )
        except ExpiredSignatureError as e:
            self._probe.token_verification_failed(reason="Token expired")
            raise InvalidTokenError("Session token has expired") from e
        except JWTError as e:
            self._probe.token_verification_failed(reason=f"JWT error: {e}")
            raise InvalidTokenError(f"Invalid session token: {e}") from e

        subject = next(
            (claims[name] for name in SUBJECT_CLAIMS if claims.get(name) is not None),
            None,
        )
        if subject is None:
            self._probe.token_verification_failed(reason="Missing subject claim")
            raise InvalidTokenError("Session token has no subject")

        self._probe.token_verified(subject=str(subject))

        return SessionTokenClaims(subject=str(subject), raw_claims=claims)
