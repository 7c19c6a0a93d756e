"""Permission and share-link endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import Principal, optional_auth, require_auth
from ..database import get_db
from ..exceptions import ShareLinkNotFoundError
from ..schemas.sharing import (
    PermissionGrant,
    PermissionResponse,
    ShareLinkCreate,
    ShareLinkPublic,
    ShareLinkResponse,
)
from ..services import SharingService

router = APIRouter(prefix="/api/documents/{document_id}", tags=["sharing"])


@router.get("/permissions", response_model=List[PermissionResponse])
def list_permissions(
    document_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Explicit grants on a document. Visible to anyone with at least viewer access."""
    return SharingService(db).list_permissions(principal, document_id)


@router.post("/permissions", response_model=PermissionResponse)
def grant_permission(
    document_id: str,
    grant: PermissionGrant,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Grant or change a user's role. Repeating a grant updates the same row."""
    return SharingService(db).grant(principal, document_id, grant.user_id, grant.role)


@router.delete("/permissions/{user_id}", status_code=204)
def revoke_permission(
    document_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Revoke a user's grant. Revoking a missing grant succeeds."""
    SharingService(db).revoke(principal, document_id, user_id)
    return Response(status_code=204)


@router.get("/share-links", response_model=List[ShareLinkResponse])
def list_share_links(
    document_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    return SharingService(db).list_share_links(principal, document_id)


@router.post("/share-links", response_model=ShareLinkResponse, status_code=201)
def create_share_link(
    document_id: str,
    link: ShareLinkCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Create a bearer link. The token in the response is the credential."""
    return SharingService(db).create_share_link(
        principal, document_id, role=link.role, expires_in_days=link.expires_in_days
    )


# Link-level routes live outside the document prefix.
links_router = APIRouter(prefix="/api/share-links", tags=["sharing"])


@links_router.delete("/{link_id}", status_code=204)
def delete_share_link(
    link_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Delete a link. Its creator may always delete it; others need editor access."""
    SharingService(db).delete_share_link(principal, link_id)
    return Response(status_code=204)


@links_router.get("/{token}", response_model=ShareLinkPublic)
def get_share_link(
    token: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(optional_auth),
):
    """Public token lookup. Expired and missing links both answer 404.

    A valid identity is optional and only noted in the lookup log.
    """
    link = SharingService(db).get_share_link_by_token(token, principal=principal)
    if link is None:
        raise ShareLinkNotFoundError()
    return link
