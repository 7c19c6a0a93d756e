"""Folder operations: create, list, rename, move, delete.

Folders belong to their owner and carry no sharing model. Parent links are
checked on every write so the tree stays acyclic; reads still walk with a
depth bound so rows written by other tools cannot loop forever.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..exceptions import FolderNotFoundError, ForbiddenError, ValidationError
from ..models import Folder
from ..repositories import EntityStore

# Longest parent chain followed before a walk gives up.
MAX_FOLDER_DEPTH = 64

logger = logging.getLogger(__name__)


class FolderService:
    """Owner-only folder management.

    Public methods:
        create_folder -- optionally under an existing parent
        list_folders  -- the organization's folders, or the caller's own
        rename_folder
        move_folder   -- rejects moves that would create a cycle
        update_folder -- rename and/or move in one call
        delete_folder -- children move up a level, documents are detached
        get_path      -- breadcrumbs, for the owner or organization members
        folder_path   -- unchecked ancestor walk used by get_path
    """

    def __init__(self, db: Session, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)
        self.folder_repo = self.store.folders

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_folder(self, principal: Principal, name: str, parent_id: Optional[str] = None) -> Folder:
        if parent_id is not None:
            self._get_owned(principal, parent_id)

        folder = self.folder_repo.create(
            name=name,
            owner_id=principal.principal_id,
            organization_id=principal.organization_id,
            parent_id=parent_id,
        )
        self.db.commit()
        logger.info(
            "Folder created",
            extra={"folder_id": folder.id, "owner_id": folder.owner_id, "parent_id": parent_id},
        )
        return folder

    def list_folders(self, principal: Principal) -> List[Folder]:
        if principal.organization_id:
            return self.folder_repo.list_by_organization(principal.organization_id)
        return self.folder_repo.list_by_owner(principal.principal_id)

    def rename_folder(self, principal: Principal, folder_id: str, name: str) -> Folder:
        folder = self._get_owned(principal, folder_id)
        folder.name = name
        self.db.commit()
        self.db.refresh(folder)
        logger.info("Folder renamed", extra={"folder_id": folder_id})
        return folder

    def move_folder(self, principal: Principal, folder_id: str, new_parent_id: Optional[str]) -> Folder:
        """Re-parent a folder. ``new_parent_id=None`` moves it to the root."""
        folder = self._get_owned(principal, folder_id)

        if new_parent_id is not None:
            self._get_owned(principal, new_parent_id)
            if new_parent_id == folder_id or folder_id in self._ancestor_ids(new_parent_id):
                raise ValidationError("A folder cannot be moved into itself or its descendants", field="parent_id")

        folder.parent_id = new_parent_id
        self.db.commit()
        self.db.refresh(folder)
        logger.info("Folder moved", extra={"folder_id": folder_id, "parent_id": new_parent_id})
        return folder

    def update_folder(self, principal: Principal, folder_id: str, changes: dict) -> Folder:
        """Apply a rename and/or move. Only keys present in *changes* are applied."""
        folder = self._get_owned(principal, folder_id)
        if "parent_id" in changes:
            folder = self.move_folder(principal, folder_id, changes["parent_id"])
        if changes.get("name") is not None:
            folder = self.rename_folder(principal, folder_id, changes["name"])
        return folder

    def delete_folder(self, principal: Principal, folder_id: str) -> None:
        """Delete a folder. Child folders take its parent; its documents become unfiled."""
        folder = self._get_owned(principal, folder_id)
        parent_id = folder.parent_id

        children = self.folder_repo.get_children(folder_id)
        for child in children:
            # Inside an existing cycle the grandparent can be the child itself.
            child.parent_id = parent_id if parent_id != child.id else None
        documents = self.folder_repo.get_documents(folder_id)
        for document in documents:
            document.folder_id = None

        self.folder_repo.delete(folder)
        self.db.commit()
        logger.info(
            "Folder deleted",
            extra={
                "folder_id": folder_id,
                "children_moved": len(children),
                "documents_detached": len(documents),
            },
        )

    def get_path(self, principal: Principal, folder_id: str) -> List[Folder]:
        """Breadcrumbs for a folder the caller owns or shares an organization with."""
        folder = self.folder_repo.get_by_id(folder_id)
        same_org = folder.organization_id is not None and folder.organization_id == principal.organization_id
        if folder.owner_id != principal.principal_id and not same_org:
            raise ForbiddenError("You do not have access to this folder", details={"folder_id": folder_id})
        return self.folder_path(folder_id)

    def folder_path(self, folder_id: str) -> List[Folder]:
        """Folders from the root down to *folder_id*.

        Stops early on a repeated id or after MAX_FOLDER_DEPTH steps.
        """
        chain: List[Folder] = []
        seen: set[str] = set()
        current = self.store.get_folder(folder_id)
        if current is None:
            raise FolderNotFoundError(folder_id)
        while current is not None and current.id not in seen and len(chain) < MAX_FOLDER_DEPTH:
            chain.append(current)
            seen.add(current.id)
            current = self.store.get_folder(current.parent_id) if current.parent_id else None
        chain.reverse()
        return chain

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_owned(self, principal: Principal, folder_id: str) -> Folder:
        folder = self.folder_repo.get_by_id(folder_id)
        if folder.owner_id != principal.principal_id:
            raise ForbiddenError("Only the folder owner can change it", details={"folder_id": folder_id})
        return folder

    def _ancestor_ids(self, folder_id: str) -> set[str]:
        """Ids of *folder_id* and its ancestors.

        Raises ValidationError if the chain is deeper than MAX_FOLDER_DEPTH.
        """
        ids: set[str] = set()
        current: Optional[str] = folder_id
        while current is not None and current not in ids:
            if len(ids) >= MAX_FOLDER_DEPTH:
                raise ValidationError("Folder nesting is too deep", field="parent_id")
            ids.add(current)
            folder = self.store.get_folder(current)
            current = folder.parent_id if folder is not None else None
        return ids
