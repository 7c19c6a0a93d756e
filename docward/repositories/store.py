"""EntityStore: the query surface the access rules depend on.

One store wraps one SQLAlchemy session, so every lookup made while
resolving a single access decision reads the same transaction. Services
receive the store rather than reaching for a global session, and tests can
hand the resolver any object with the same methods.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Document, Folder, Permission, ShareLink, Version
from .document_repository import DocumentRepository
from .folder_repository import FolderRepository
from .permission_repository import PermissionRepository
from .share_link_repository import ShareLinkRepository
from .version_repository import VersionRepository


class EntityStore:
    """Read primitives over documents, permissions, share links, versions and folders.

    Writes go through the repository attributes (``documents``,
    ``permissions``, ``share_links``, ``versions``, ``folders``).
    """

    def __init__(self, db: Session):
        self.db = db
        self.documents = DocumentRepository(db)
        self.permissions = PermissionRepository(db)
        self.share_links = ShareLinkRepository(db)
        self.versions = VersionRepository(db)
        self.folders = FolderRepository(db)

    def get_document(self, document_id: str) -> Optional[Document]:
        return self.documents.get_by_id_optional(document_id)

    def get_permission(self, document_id: str, user_id: str) -> Optional[Permission]:
        return self.permissions.get(document_id, user_id)

    def list_permissions(self, document_id: str) -> List[Permission]:
        return self.permissions.list_by_document(document_id)

    def get_share_link_by_token(self, token: str) -> Optional[ShareLink]:
        """Raw lookup, expired links included."""
        return self.share_links.get_by_token(token)

    def get_share_link(self, link_id: str) -> Optional[ShareLink]:
        return self.share_links.get_by_id_optional(link_id)

    def list_share_links(self, document_id: str) -> List[ShareLink]:
        """Raw listing, expired links included."""
        return self.share_links.list_by_document(document_id)

    def list_versions(self, document_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Version]:
        """Snapshots newest first."""
        return self.versions.get_by_document(document_id, skip=skip, limit=limit)

    def get_version(self, version_id: str) -> Optional[Version]:
        return self.versions.get_by_id_optional(version_id)

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        return self.folders.get_by_id_optional(folder_id)
