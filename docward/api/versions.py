"""Version API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import Principal, require_auth
from ..database import get_db
from ..schemas.version import VersionCreate, VersionResponse
from ..services import VersionService

router = APIRouter(prefix="/api/documents/{document_id}/versions", tags=["versions"])


@router.get("", response_model=List[VersionResponse])
def list_versions(
    document_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Version history, newest first. Empty when the caller may not see it."""
    return VersionService(db).list_versions(principal, document_id, skip=skip, limit=limit)


@router.get("/latest", response_model=Optional[VersionResponse])
def get_latest_version(
    document_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Latest snapshot, or null when there is none or history is hidden."""
    return VersionService(db).latest_version(principal, document_id)


@router.post("", response_model=VersionResponse, status_code=201)
def create_version(
    document_id: str,
    version: VersionCreate,
    token: Optional[str] = Query(None, max_length=256),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Snapshot the document. Requires editor access."""
    return VersionService(db).create_version(principal, document_id, version, share_token=token)


version_router = APIRouter(prefix="/api/versions", tags=["versions"])


@version_router.get("/{version_id}", response_model=VersionResponse)
def get_version(
    version_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Get one version. Unlike the list, an unauthorized caller gets 403."""
    return VersionService(db).get_version(principal, version_id)
