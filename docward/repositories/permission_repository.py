"""Permission repository: explicit (document, user) → role rows."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import Document, Permission

logger = logging.getLogger(__name__)


class PermissionRepository:
    """Data access layer for permissions."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, document_id: str, user_id: str) -> Optional[Permission]:
        return (
            self.db.query(Permission)
            .filter(Permission.document_id == document_id, Permission.user_id == user_id)
            .first()
        )

    def list_by_document(self, document_id: str) -> List[Permission]:
        return (
            self.db.query(Permission)
            .filter(Permission.document_id == document_id)
            .order_by(Permission.created_at, Permission.user_id)
            .all()
        )

    def upsert(self, document_id: str, user_id: str, role: str) -> Permission:
        """Insert the (document, user) row or patch its role.

        The document row is locked FOR UPDATE (PostgreSQL; a no-op on SQLite)
        so concurrent grants on one document serialize. The unique
        constraint is the final guard: if an insert still loses a race the
        transaction is rolled back and the winner's row is patched instead.
        Callers must not have other pending writes in this session.
        """
        self.db.query(Document.id).filter(Document.id == document_id).with_for_update().first()

        existing = self.get(document_id, user_id)
        if existing is not None:
            existing.role = role
            self.db.flush()
            return existing

        permission = Permission(document_id=document_id, user_id=user_id, role=role)
        self.db.add(permission)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Concurrent grant detected, patching existing row",
                extra={"document_id": document_id, "user_id": user_id},
            )
            existing = self.get(document_id, user_id)
            if existing is None:
                raise
            existing.role = role
            self.db.flush()
            return existing
        return permission

    def delete(self, document_id: str, user_id: str) -> bool:
        """Remove the row if present. Returns True if a row was removed."""
        permission = self.get(document_id, user_id)
        if permission is None:
            return False
        self.db.delete(permission)
        self.db.flush()
        return True
