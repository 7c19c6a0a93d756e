"""Document API endpoints.

Endpoints are thin: DocumentService resolves the caller's capability and
raises the right error; routes only translate HTTP to service calls.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import Principal, require_auth
from ..database import get_db
from ..exceptions import DocumentNotFoundError
from ..schemas.document import (
    AccessResponse,
    DocumentCreate,
    DocumentListResponse,
    DocumentLookupRequest,
    DocumentResponse,
    DocumentSummary,
    DocumentUpdate,
)
from ..services import DocumentService, SharingService

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(
    document: DocumentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Create a document owned by the caller."""
    return DocumentService(db).create_document(principal, document)


@router.get("", response_model=List[DocumentListResponse])
def list_documents(
    search: Optional[str] = Query(None, max_length=255),
    folder_id: Optional[str] = None,
    starred: Optional[bool] = None,
    tag: Optional[str] = Query(None, max_length=100),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """List the caller's workspace: organization documents, or owned and shared ones."""
    return DocumentService(db).list_documents(
        principal,
        search=search,
        folder_id=folder_id,
        starred=starred,
        tag=tag,
        skip=skip,
        limit=limit,
    )


# --- Fixed-path endpoints (must be before /{document_id} to avoid route shadowing) ---


@router.post("/lookup", response_model=List[DocumentSummary])
def lookup_documents(
    request: DocumentLookupRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Resolve ids to names, silently dropping documents the caller cannot read."""
    return DocumentService(db).get_documents_by_ids(principal, request.ids)


# --- Parameterized endpoints ---


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    token: Optional[str] = Query(None, max_length=256),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Get a document. ``token`` is an optional share-link token."""
    return DocumentService(db).get_document(principal, document_id, share_token=token)


@router.get("/{document_id}/access", response_model=AccessResponse)
def get_my_access(
    document_id: str,
    token: Optional[str] = Query(None, max_length=256),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """The caller's own role on the document and which rule granted it."""
    access = SharingService(db).get_user_permission(principal, document_id, share_token=token)
    if access is None:
        # Same answer for "no such document" and "no access".
        raise DocumentNotFoundError(document_id)
    return access


@router.patch("/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: str,
    update: DocumentUpdate,
    token: Optional[str] = Query(None, max_length=256),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Update title, content, folder, tags or star. Requires editor access."""
    changes = update.model_dump(exclude_unset=True)
    return DocumentService(db).update_document(principal, document_id, changes, share_token=token)


@router.delete("/{document_id}", status_code=204)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Delete a document together with its permissions, share links and versions."""
    DocumentService(db).delete_document(principal, document_id)
    return Response(status_code=204)
