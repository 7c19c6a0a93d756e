"""Version snapshot gate.

History visibility is broader than other reads: besides owner, organization
and explicit permission holders, anyone may see the history of a document
that currently has at least one active share link, whether or not they
present its token.

The list read soft-fails: an unauthorized caller gets an empty list so a
viewer whose link was revoked after page load keeps a working UI. Lookup of
a single version by id fails loudly with Forbidden. Do not extend the
soft-fail to other reads.
"""

import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core import clock
from ..core.auth import Principal
from ..exceptions import DocumentNotFoundError, ForbiddenError, VersionNotFoundError
from ..models import Document, Version
from ..repositories import EntityStore
from ..schemas.version import VersionCreate
from .access_resolver import (
    AccessStore,
    Action,
    Capability,
    authorize_document,
    has_active_share_link,
    resolve_access,
)

logger = logging.getLogger(__name__)


class VersionAccess(str, Enum):
    UNRESOLVED = "unresolved"
    AUTHORIZED_FULL = "authorized_full"
    AUTHORIZED_VIA_LINK = "authorized_via_link"
    UNAUTHORIZED = "unauthorized"

    @property
    def is_authorized(self) -> bool:
        return self in (VersionAccess.AUTHORIZED_FULL, VersionAccess.AUTHORIZED_VIA_LINK)


def resolve_version_access(
    store: AccessStore,
    document: Document,
    principal: Optional[Principal],
    now: Optional[int] = None,
) -> VersionAccess:
    """Move from UNRESOLVED to one of the three terminal states."""
    if now is None:
        now = clock.now_ms()

    state = VersionAccess.UNRESOLVED
    decision = resolve_access(store, document, principal, now=now)
    if decision.capability >= Capability.VIEWER:
        state = VersionAccess.AUTHORIZED_FULL
    elif has_active_share_link(store, document.id, now):
        state = VersionAccess.AUTHORIZED_VIA_LINK
    else:
        state = VersionAccess.UNAUTHORIZED
    return state


class VersionService:
    """Read and append document version history."""

    def __init__(self, db: Session, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    def _load_document(self, document_id: str) -> Document:
        document = self.store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def list_versions(
        self,
        principal: Principal,
        document_id: str,
        skip: int = 0,
        limit: Optional[int] = None,
        now: Optional[int] = None,
    ) -> List[Version]:
        """Versions newest first, or ``[]`` when the caller may not see them."""
        document = self._load_document(document_id)
        access = resolve_version_access(self.store, document, principal, now)
        if not access.is_authorized:
            logger.debug(
                "Version history hidden from caller",
                extra={"document_id": document_id, "principal_id": principal.principal_id},
            )
            return []
        return self.store.list_versions(document.id, skip=skip, limit=limit)

    def latest_version(
        self,
        principal: Principal,
        document_id: str,
        now: Optional[int] = None,
    ) -> Optional[Version]:
        """Most recent snapshot under the same gate as the list; None when hidden or empty."""
        document = self._load_document(document_id)
        if not resolve_version_access(self.store, document, principal, now).is_authorized:
            return None
        return self.store.versions.get_latest(document.id)

    def get_version(self, principal: Principal, version_id: str, now: Optional[int] = None) -> Version:
        version = self.store.get_version(version_id)
        if version is None:
            raise VersionNotFoundError(version_id)

        document = self._load_document(version.document_id)
        if not resolve_version_access(self.store, document, principal, now).is_authorized:
            raise ForbiddenError(
                "You do not have access to this document's history",
                details={"document_id": document.id, "version_id": version_id},
            )
        return version

    def create_version(
        self,
        principal: Principal,
        document_id: str,
        data: VersionCreate,
        share_token: Optional[str] = None,
        now: Optional[int] = None,
    ) -> Version:
        """Append a snapshot. Requires editor capability."""
        if now is None:
            now = clock.now_ms()
        document, _ = authorize_document(
            self.store, document_id, principal, Action.CREATE_VERSION, share_token, now
        )
        version = self.store.versions.create(document.id, data, created_by=principal.principal_id, now=now)
        self.db.commit()
        self.db.refresh(version)
        logger.info(
            "Version created",
            extra={"document_id": document.id, "version_id": version.id, "created_by": principal.principal_id},
        )
        return version
