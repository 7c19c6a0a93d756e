"""Repository for folder database operations."""

from typing import List, Optional

from ..models import Document, Folder
from ..exceptions import FolderNotFoundError
from .base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    """Data access layer for folders."""

    model_class = Folder
    not_found_error = FolderNotFoundError

    def create(
        self,
        name: str,
        owner_id: str,
        organization_id: Optional[str],
        parent_id: Optional[str],
    ) -> Folder:
        folder = Folder(
            name=name,
            owner_id=owner_id,
            organization_id=organization_id,
            parent_id=parent_id,
        )
        self.db.add(folder)
        self.db.flush()
        self.db.refresh(folder)
        return folder

    def list_by_owner(self, owner_id: str) -> List[Folder]:
        return (
            self.db.query(Folder)
            .filter(Folder.owner_id == owner_id)
            .order_by(Folder.name, Folder.id)
            .all()
        )

    def list_by_organization(self, organization_id: str) -> List[Folder]:
        return (
            self.db.query(Folder)
            .filter(Folder.organization_id == organization_id)
            .order_by(Folder.name, Folder.id)
            .all()
        )

    def get_children(self, folder_id: str) -> List[Folder]:
        return self.db.query(Folder).filter(Folder.parent_id == folder_id).all()

    def get_documents(self, folder_id: str) -> List[Document]:
        return self.db.query(Document).filter(Document.folder_id == folder_id).all()
