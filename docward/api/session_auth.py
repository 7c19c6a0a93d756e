"""Real-time session authorization endpoint.

The collaboration client is a FastAPI dependency so tests (and alternative
deployments) can swap it with ``app.dependency_overrides``.
"""

import logging
import threading
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..core.auth import Principal, require_auth
from ..database import get_db
from ..repositories import EntityStore
from ..schemas.session import SessionAuthRequest
from ..services import CollaborationClient, SessionGrantBridge

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])

_client: Optional[CollaborationClient] = None
_client_lock = threading.Lock()


def get_collaboration_client() -> CollaborationClient:
    """Process-wide client, created on first use."""
    global _client
    with _client_lock:
        if _client is None:
            _client = CollaborationClient()
        return _client


def close_collaboration_client() -> None:
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None


@router.post("/auth-session")
def authorize_session(
    request: SessionAuthRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
    client: CollaborationClient = Depends(get_collaboration_client),
):
    """Grant the caller a collaboration session for ``room`` (a document id).

    The collaboration service's response body and status are returned as-is.
    """
    bridge = SessionGrantBridge(EntityStore(db), client)
    grant = bridge.authorize(principal, request.room, share_token=request.token)
    return Response(content=grant.body, status_code=grant.status_code, media_type="application/json")
