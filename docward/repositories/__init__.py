"""Data access repositories."""

from .base import BaseRepository
from .document_repository import DocumentRepository
from .version_repository import VersionRepository
from .permission_repository import PermissionRepository
from .share_link_repository import ShareLinkRepository
from .folder_repository import FolderRepository
from .store import EntityStore

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "VersionRepository",
    "PermissionRepository",
    "ShareLinkRepository",
    "FolderRepository",
    "EntityStore",
]
