"""Document repository for database operations."""

import json
from typing import Any, List, Optional

from sqlalchemy import String, cast, or_

from ..models import Document, Permission
from ..schemas.document import DocumentCreate
from ..exceptions import DocumentNotFoundError
from .base import BaseRepository, like_pattern

# Columns a caller may change after creation. owner_id and
# organization_id are deliberately absent.
UPDATABLE_FIELDS = frozenset({"title", "initial_content", "folder_id", "tags", "is_starred"})


class DocumentRepository(BaseRepository[Document]):
    """Repository for document CRUD operations."""

    model_class = Document
    not_found_error = DocumentNotFoundError

    def create(
        self,
        owner_id: str,
        organization_id: Optional[str],
        document: DocumentCreate,
    ) -> Document:
        """Create a new document owned by *owner_id*."""
        db_document = Document(
            title=document.title,
            initial_content=document.initial_content,
            owner_id=owner_id,
            organization_id=organization_id,
            folder_id=document.folder_id,
            tags=list(document.tags),
            is_starred=False,
        )
        self.db.add(db_document)
        self.db.flush()
        self.db.refresh(db_document)
        return db_document

    def update(self, document: Document, changes: dict[str, Any]) -> Document:
        """Apply a partial update. Unknown or immutable keys are ignored."""
        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(document, field, value)
        self.db.flush()
        self.db.refresh(document)
        return document

    def get_many(self, document_ids: List[str]) -> List[Document]:
        if not document_ids:
            return []
        return self.db.query(Document).filter(Document.id.in_(document_ids)).all()

    def list_visible(
        self,
        principal_id: str,
        organization_id: Optional[str],
        search: Optional[str] = None,
        folder_id: Optional[str] = None,
        starred: Optional[bool] = None,
        tag: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Document]:
        """List the documents that belong in a principal's workspace.

        Inside an organization that is the organization's documents. Without
        one it is the documents the principal owns or holds a permission on.
        Newest first.
        """
        query = self.db.query(Document)

        if organization_id:
            query = query.filter(Document.organization_id == organization_id)
        else:
            permitted = self.db.query(Permission.document_id).filter(
                Permission.user_id == principal_id
            )
            query = query.filter(
                or_(Document.owner_id == principal_id, Document.id.in_(permitted))
            )

        if search:
            query = query.filter(Document.title.ilike(like_pattern(search.strip()), escape="\\"))
        if folder_id:
            query = query.filter(Document.folder_id == folder_id)
        if starred is not None:
            query = query.filter(Document.is_starred.is_(starred))
        if tag:
            # JSON arrays are stored as text on SQLite and render as text on
            # PostgreSQL, so a quoted-element substring match works on both.
            query = query.filter(
                cast(Document.tags, String).like(like_pattern(json.dumps(tag.strip())), escape="\\")
            )

        return (
            query.order_by(Document.created_at.desc(), Document.id)
            .offset(skip)
            .limit(limit)
            .all()
        )
