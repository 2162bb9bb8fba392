"""Credential extraction and classification.

Reads the API key, bearer token and tenant-id candidates from a request's
headers and query string. Every candidate is extracted independently; the
cascade decides which ones matter.

The bearer token is classified by shape only. A token that splits on ``.``
into exactly three non-empty parts is reserved as a session token candidate
and is never offered to the API key validators.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

API_KEY_HEADER = "x-api-key"
AUTHORIZATION_HEADER = "authorization"
TENANT_ID_HEADER = "x-tenant-id"
TENANT_ID_QUERY_PARAM = "tenantId"

_BEARER_SCHEME = "bearer"


class HeaderMap(Mapping[str, str]):
    """Read-only header mapping with case-insensitive keys.

    Accepts any mapping (a plain dict, Starlette ``Headers``) and folds
    every key to lower case. Blank values are kept; callers decide whether
    a blank value counts as absent.
    """

    def __init__(self, headers: Mapping[str, str] | None = None):
        self._headers: dict[str, str] = {}
        for key, value in (headers or {}).items():
            self._headers[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._headers[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)


@dataclass(frozen=True)
class ApiKeyCandidate:
    """A bearer value that may be a tenant API key or user access key."""

    value: str


@dataclass(frozen=True)
class StructuredTokenCandidate:
    """A bearer value shaped like a signed session token (three parts)."""

    value: str


@dataclass(frozen=True)
class UnknownCandidate:
    """No usable bearer value was supplied."""

    value: None = None


BearerCandidate = ApiKeyCandidate | StructuredTokenCandidate | UnknownCandidate


def classify_bearer_token(token: str | None) -> BearerCandidate:
    """Classify a bearer token by its shape.

    This is a coarse heuristic, not verification: a structured token
    candidate may still fail signature checks later.

    Args:
        token: The raw bearer token, or None

    Returns:
        StructuredTokenCandidate if the token has exactly three non-empty
        dot-separated parts, UnknownCandidate if it is missing or blank,
        ApiKeyCandidate otherwise
    """
    if token is None:
        return UnknownCandidate()

    token = token.strip()
    if not token:
        return UnknownCandidate()

    parts = token.split(".")
    if len(parts) == 3 and all(parts):
        return StructuredTokenCandidate(value=token)

    return ApiKeyCandidate(value=token)


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` value.

    The scheme is matched case-insensitively. Any other scheme, or a
    missing/blank token, yields None.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != _BEARER_SCHEME:
        return None

    token = token.strip()
    return token or None


def _non_blank(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Credentials:
    """All credential candidates found on a single request.

    Attributes:
        api_key_header: Value of the explicit API key header.
        bearer: Classified bearer token.
        tenant_id_header: Tenant id candidate from the header.
        tenant_id_query: Tenant id candidate from the query string.
    """

    api_key_header: str | None = None
    bearer: BearerCandidate = UnknownCandidate()
    tenant_id_header: str | None = None
    tenant_id_query: str | None = None

    @property
    def api_key(self) -> str | None:
        """The effective API-key-class credential.

        The explicit header wins; otherwise the bearer token, but only when
        it is not shaped like a session token.
        """
        if self.api_key_header is not None:
            return self.api_key_header
        if isinstance(self.bearer, ApiKeyCandidate):
            return self.bearer.value
        return None

    @property
    def session_token(self) -> str | None:
        """The bearer token when it is a structured token candidate."""
        if isinstance(self.bearer, StructuredTokenCandidate):
            return self.bearer.value
        return None

    @property
    def fallback_tenant_id(self) -> str | None:
        """Tenant id for the no-key path: header first, then query."""
        return self.tenant_id_header or self.tenant_id_query

    @property
    def override_tenant_id(self) -> str | None:
        """Tenant id a super admin selects: query first, then header."""
        return self.tenant_id_query or self.tenant_id_header


def extract_credentials(
    headers: Mapping[str, str],
    query_params: Mapping[str, str] | None = None,
) -> Credentials:
    """Read and classify every credential candidate on a request.

    Args:
        headers: Request headers (any casing)
        query_params: Request query parameters

    Returns:
        Credentials with each candidate extracted independently
    """
    header_map = headers if isinstance(headers, HeaderMap) else HeaderMap(headers)
    query_params = query_params or {}

    return Credentials(
        api_key_header=_non_blank(header_map.get(API_KEY_HEADER)),
        bearer=classify_bearer_token(
            parse_bearer_token(header_map.get(AUTHORIZATION_HEADER))
        ),
        tenant_id_header=_non_blank(header_map.get(TENANT_ID_HEADER)),
        tenant_id_query=_non_blank(query_params.get(TENANT_ID_QUERY_PARAM)),
    )
