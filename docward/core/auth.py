"""Identity context: deep module exposing FastAPI dependencies.

Public interface:
    ``normalize_claims``: the single place that turns the identity
                           provider's loosely-shaped claims into a Principal.
    ``require_auth``:     returns Principal or raises 401.
    ``optional_auth``:    returns Principal or None, never raises.

No dependency here touches the database: an unauthenticated request is
rejected before any store access happens.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import decode_token
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Normalized identity of the caller.

    ``organization_id`` is None when the caller is not acting inside an
    organization; organization rules are then skipped, never wildcarded.
    """

    principal_id: str
    organization_id: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_claims(claims: Optional[Mapping[str, Any]]) -> Optional[Principal]:
    """Build a Principal from raw identity claims, or None if there is no subject.

    Organization id comes from ``o.id`` and falls back to the legacy
    ``org_id`` claim.
    """
    if not claims:
        return None

    subject = _text(claims.get("sub"))
    if subject is None:
        return None

    org_claim = claims.get("o")
    organization_id = _text(org_claim.get("id")) if isinstance(org_claim, Mapping) else None
    if organization_id is None:
        organization_id = _text(claims.get("org_id"))

    return Principal(
        principal_id=subject,
        organization_id=organization_id,
        display_name=_text(claims.get("name")) or _text(claims.get("full_name")),
        email=_text(claims.get("email")),
        avatar_url=_text(claims.get("picture")) or _text(claims.get("image_url")),
    )


def _principal_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[Principal]:
    if credentials is None:
        return None
    claims = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    return normalize_claims(claims)


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Principal:
    """Require a valid identity token and return the caller's Principal."""
    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    principal = _principal_from_credentials(credentials)
    if principal is None:
        raise AuthenticationError("Invalid or expired token")
    return principal


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[Principal]:
    """Resolve a Principal if a valid token is present. Never raises."""
    principal = _principal_from_credentials(credentials)
    if credentials is not None and principal is None:
        logger.debug("Ignoring invalid identity token on public endpoint")
    return principal
