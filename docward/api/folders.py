"""Folder API endpoints. Every mutation is restricted to the folder's owner."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List

from ..core.auth import Principal, require_auth
from ..database import get_db
from ..schemas.folder import FolderCreate, FolderResponse, FolderUpdate
from ..services import FolderService

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.get("", response_model=List[FolderResponse])
def list_folders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    return FolderService(db).list_folders(principal)


@router.post("", response_model=FolderResponse, status_code=201)
def create_folder(
    folder: FolderCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    return FolderService(db).create_folder(principal, folder.name, folder.parent_id)


@router.get("/{folder_id}/path", response_model=List[FolderResponse])
def get_folder_path(
    folder_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Breadcrumb chain from the root folder down to this one."""
    return FolderService(db).get_path(principal, folder_id)


@router.patch("/{folder_id}", response_model=FolderResponse)
def update_folder(
    folder_id: str,
    update: FolderUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Rename and/or move a folder. Moves that would create a cycle are rejected."""
    changes = update.model_dump(exclude_unset=True)
    return FolderService(db).update_folder(principal, folder_id, changes)


@router.delete("/{folder_id}", status_code=204)
def delete_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_auth),
):
    """Delete a folder. Subfolders move up one level and documents become unfiled."""
    FolderService(db).delete_folder(principal, folder_id)
    return Response(status_code=204)
