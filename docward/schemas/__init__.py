"""Pydantic schemas for API validation."""

from .document import (
    DocumentCreate,
    DocumentUpdate,
    DocumentResponse,
    DocumentListResponse,
    DocumentLookupRequest,
    DocumentSummary,
    AccessResponse,
)
from .version import (
    VersionCreate,
    VersionResponse,
)
from .sharing import (
    Role,
    PermissionGrant,
    PermissionResponse,
    ShareLinkCreate,
    ShareLinkResponse,
    ShareLinkPublic,
)
from .folder import (
    FolderCreate,
    FolderUpdate,
    FolderResponse,
)
from .session import SessionAuthRequest

__all__ = [
    "DocumentCreate",
    "DocumentUpdate",
    "DocumentResponse",
    "DocumentListResponse",
    "DocumentLookupRequest",
    "DocumentSummary",
    "AccessResponse",
    "VersionCreate",
    "VersionResponse",
    "Role",
    "PermissionGrant",
    "PermissionResponse",
    "ShareLinkCreate",
    "ShareLinkResponse",
    "ShareLinkPublic",
    "FolderCreate",
    "FolderUpdate",
    "FolderResponse",
    "SessionAuthRequest",
]
