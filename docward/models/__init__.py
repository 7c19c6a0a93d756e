"""Database models."""

from .document import Document
from .version import Version
from .permission import Permission
from .share_link import ShareLink
from .folder import Folder

__all__ = ["Document", "Version", "Permission", "ShareLink", "Folder"]
