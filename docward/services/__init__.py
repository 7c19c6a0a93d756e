"""Business logic services."""

from .document_service import DocumentService
from .folder_service import FolderService
from .sharing_service import SharingService
from .version_service import VersionService, VersionAccess, resolve_version_access
from .session_grant import SessionGrantBridge, SessionGrant, GrantScope, GRANT_SCOPES
from .collaboration_client import CollaborationClient

__all__ = [
    "DocumentService",
    "FolderService",
    "SharingService",
    "VersionService",
    "VersionAccess",
    "resolve_version_access",
    "SessionGrantBridge",
    "SessionGrant",
    "GrantScope",
    "GRANT_SCOPES",
    "CollaborationClient",
]
