"""Document service: document lifecycle behind the access rules.

Every operation that touches an existing document resolves the caller's
capability first (see access_resolver). Read and edit accept an optional
share token; deletion never does.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Principal
from ..core.config import settings
from ..exceptions import ValidationError
from ..models import Document
from ..repositories import EntityStore
from ..schemas.document import DocumentCreate
from .access_resolver import Action, authorize_document, check_action, resolve_access

logger = logging.getLogger(__name__)


class DocumentService:
    """Create, read, update, list and delete documents."""

    def __init__(self, db: Session, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)
        self.doc_repo = self.store.documents

    def _require_folder(self, folder_id: Optional[str]) -> None:
        if folder_id is not None and self.store.get_folder(folder_id) is None:
            raise ValidationError(f"Folder not found: {folder_id}", field="folder_id")

    def create_document(self, principal: Principal, data: DocumentCreate) -> Document:
        """Create a document owned by the caller, inside the caller's organization if any."""
        self._require_folder(data.folder_id)
        document = self.doc_repo.create(principal.principal_id, principal.organization_id, data)
        self.db.commit()
        self.db.refresh(document)
        logger.info(
            "Document created",
            extra={
                "document_id": document.id,
                "owner_id": document.owner_id,
                "organization_id": document.organization_id,
            },
        )
        return document

    def get_document(
        self,
        principal: Optional[Principal],
        document_id: str,
        share_token: Optional[str] = None,
        now: Optional[int] = None,
    ) -> Document:
        document, _ = authorize_document(self.store, document_id, principal, Action.READ, share_token, now)
        return document

    def get_documents_by_ids(self, principal: Principal, document_ids: List[str]) -> List[dict[str, str]]:
        """``{id, name}`` for the requested documents the caller can read, in request order."""
        by_id = {doc.id: doc for doc in self.doc_repo.get_many(list(dict.fromkeys(document_ids)))}
        summaries = []
        for document_id in dict.fromkeys(document_ids):
            document = by_id.get(document_id)
            if document is None:
                continue
            if check_action(resolve_access(self.store, document, principal), Action.READ):
                summaries.append({"id": document.id, "name": document.title})
        return summaries

    def list_documents(
        self,
        principal: Principal,
        search: Optional[str] = None,
        folder_id: Optional[str] = None,
        starred: Optional[bool] = None,
        tag: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Document]:
        return self.doc_repo.list_visible(
            principal.principal_id,
            principal.organization_id,
            search=search,
            folder_id=folder_id,
            starred=starred,
            tag=tag,
            skip=skip,
            limit=limit,
        )

    def update_document(
        self,
        principal: Principal,
        document_id: str,
        changes: dict[str, Any],
        share_token: Optional[str] = None,
        now: Optional[int] = None,
    ) -> Document:
        """Apply a partial update. Requires editor capability.

        *changes* holds only the fields the caller sent; ``owner_id`` and
        ``organization_id`` are never written.
        """
        document, _ = authorize_document(self.store, document_id, principal, Action.EDIT, share_token, now)

        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationError("Title cannot be empty", field="title")
        if changes.get("folder_id") is not None:
            self._require_folder(changes["folder_id"])
        if "tags" in changes and changes["tags"] is None:
            changes = {**changes, "tags": []}
        if "is_starred" in changes and changes["is_starred"] is None:
            changes = {k: v for k, v in changes.items() if k != "is_starred"}

        updated = self.doc_repo.update(document, changes)
        self.db.commit()
        logger.info(
            "Document updated",
            extra={"document_id": document.id, "fields": sorted(changes), "updated_by": principal.principal_id},
        )
        return updated

    def delete_document(self, principal: Principal, document_id: str) -> None:
        """Delete a document with its permissions, share links and versions."""
        document, decision = authorize_document(
            self.store,
            document_id,
            principal,
            Action.DELETE,
            delete_requires_owner=settings.delete_requires_owner,
        )
        self.doc_repo.delete(document)
        self.db.commit()
        logger.info(
            "Document deleted",
            extra={"document_id": document_id, "deleted_by": principal.principal_id, "via": decision.rule.value},
        )
