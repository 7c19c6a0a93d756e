"""Session grant bridge: real-time collaboration authorization.

Re-runs the same access resolution as every database path (the client's
idea of its own role is never trusted) and translates the capability into
the collaboration service's permission scopes. Issuing the session is the
only side effect: nothing is written to the store.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from ..core import clock
from ..core.auth import Principal
from ..core.logging_config import token_hint
from ..exceptions import DocumentNotFoundError, ForbiddenError, ShareLinkUnavailableError
from .access_resolver import AccessStore, Capability, find_active_share_link, resolve_access

logger = logging.getLogger(__name__)


class GrantScope(str, Enum):
    """Room permissions understood by the collaboration service."""

    READ = "room:read"
    PRESENCE_WRITE = "room:presence:write"
    COMMENTS_READ = "comments:read"
    COMMENTS_WRITE = "comments:write"
    CONTENT_WRITE = "room:write"


_VIEWER_SCOPES = frozenset({GrantScope.READ, GrantScope.COMMENTS_READ})
_COMMENTER_SCOPES = _VIEWER_SCOPES | {GrantScope.PRESENCE_WRITE, GrantScope.COMMENTS_WRITE}
_EDITOR_SCOPES = _COMMENTER_SCOPES | {GrantScope.CONTENT_WRITE}

# Each level's set contains every lower level's set.
GRANT_SCOPES: dict[Capability, frozenset[GrantScope]] = {
    Capability.NONE: frozenset(),
    Capability.VIEWER: _VIEWER_SCOPES,
    Capability.COMMENTER: _COMMENTER_SCOPES,
    Capability.EDITOR: _EDITOR_SCOPES,
}


def grant_scopes_for(capability: Capability) -> frozenset[GrantScope]:
    """Scopes for a capability; anything unmapped above NONE gets viewer scopes."""
    if capability is Capability.NONE:
        return GRANT_SCOPES[Capability.NONE]
    return GRANT_SCOPES.get(capability, _VIEWER_SCOPES)


def presence_color(name: str) -> str:
    """Stable cursor color derived from the display name."""
    hue = sum(ord(ch) for ch in name) % 360
    return f"hsl({hue}, 80%, 60%)"


def build_user_info(principal: Principal) -> dict[str, Any]:
    name = principal.display_name or principal.email or "Anonymous"
    return {
        "name": name,
        "avatar": principal.avatar_url,
        "color": presence_color(name),
    }


class SessionClient(Protocol):
    def authorize_user(
        self,
        user_id: str,
        room: str,
        permissions: list[str],
        user_info: dict[str, Any],
    ) -> tuple[int, str]: ...


@dataclass(frozen=True)
class SessionGrant:
    """Outcome of a successful authorization, passed through to the HTTP caller."""

    status_code: int
    body: str
    capability: Capability
    scopes: frozenset[GrantScope]


class SessionGrantBridge:
    """Authorize a principal for a document's real-time room."""

    def __init__(self, store: AccessStore, client: SessionClient):
        self.store = store
        self.client = client

    def authorize(
        self,
        principal: Principal,
        room: str,
        share_token: Optional[str] = None,
        now: Optional[int] = None,
    ) -> SessionGrant:
        """Resolve access for *room* (a document id) and request a session.

        Raises:
            DocumentNotFoundError: the room names no document.
            ShareLinkUnavailableError: no access, and the presented token
                matches no active link.
            ForbiddenError: no access otherwise.
            CollaborationServiceError: the service call failed; no grant exists.
        """
        if now is None:
            now = clock.now_ms()

        document = self.store.get_document(room)
        if document is None:
            raise DocumentNotFoundError(room)

        decision = resolve_access(self.store, document, principal, share_token, now)
        scopes = grant_scopes_for(decision.capability)

        if not scopes:
            log_extra = {
                "document_id": document.id,
                "principal_id": principal.principal_id,
                "token_hint": token_hint(share_token),
            }
            if share_token and find_active_share_link(self.store, share_token, now) is None:
                logger.warning("Session refused: share link unavailable", extra=log_extra)
                raise ShareLinkUnavailableError(document.id)
            logger.warning("Session refused: no access", extra=log_extra)
            raise ForbiddenError(
                "You do not have access to this document",
                details={"document_id": document.id},
            )

        permissions = sorted(scope.value for scope in scopes)
        status_code, body = self.client.authorize_user(
            principal.principal_id,
            document.id,
            permissions,
            build_user_info(principal),
        )
        logger.info(
            "Session granted",
            extra={
                "document_id": document.id,
                "principal_id": principal.principal_id,
                "capability": decision.capability.role,
                "via": decision.rule.value,
                "status_code": status_code,
            },
        )
        return SessionGrant(status_code, body, decision.capability, scopes)
