"""API routes."""

from .documents import router as documents_router
from .sharing import router as sharing_router, links_router as share_links_router
from .versions import router as versions_router, version_router
from .folders import router as folders_router
from .session_auth import router as session_router

__all__ = [
    "documents_router",
    "sharing_router",
    "share_links_router",
    "versions_router",
    "version_router",
    "folders_router",
    "session_router",
]
