"""Sharing management: explicit permissions and bearer share links.

Every mutation here is gated by the access resolver. Management resolves
without a share token, so holding a link never confers the right to
re-share the document.
"""

import logging
import secrets
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import clock
from ..core.auth import Principal
from ..core.config import settings
from ..core.logging_config import token_hint
from ..exceptions import DatabaseError, DocumentNotFoundError, ShareLinkNotFoundError, ValidationError
from ..models import Permission, ShareLink
from ..repositories import EntityStore
from .access_resolver import (
    ROLES,
    Action,
    Capability,
    authorize_document,
    find_active_share_link,
    resolve_access,
    require_action,
)

logger = logging.getLogger(__name__)

# A collision of two 256-bit tokens is not expected in practice; the retry
# exists so the unique index, not luck, is what guarantees uniqueness.
MAX_TOKEN_ATTEMPTS = 3


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}", field="role")
    return role


class SharingService:
    """Grant/revoke permissions and manage share links for documents."""

    def __init__(self, db: Session, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    # -- Permissions --------------------------------------------------------

    def grant(self, principal: Principal, document_id: str, grantee_id: str, role: str) -> Permission:
        """Give *grantee_id* exactly *role* on the document (insert or update)."""
        document, _ = authorize_document(self.store, document_id, principal, Action.MANAGE_SHARING)

        _validate_role(role)
        grantee_id = (grantee_id or "").strip()
        if not grantee_id:
            raise ValidationError("user_id cannot be empty", field="user_id")
        if grantee_id == document.owner_id:
            raise ValidationError("The document owner already has full access", field="user_id")

        permission = self.store.permissions.upsert(document.id, grantee_id, role)
        self.db.commit()
        self.db.refresh(permission)
        logger.info(
            "Permission granted",
            extra={
                "document_id": document.id,
                "grantee_id": grantee_id,
                "role": role,
                "granted_by": principal.principal_id,
            },
        )
        return permission

    def revoke(self, principal: Principal, document_id: str, grantee_id: str) -> bool:
        """Remove the grantee's permission. Absent rows are not an error."""
        document, _ = authorize_document(self.store, document_id, principal, Action.MANAGE_SHARING)

        removed = self.store.permissions.delete(document.id, grantee_id)
        self.db.commit()
        if removed:
            logger.info(
                "Permission revoked",
                extra={"document_id": document.id, "grantee_id": grantee_id, "revoked_by": principal.principal_id},
            )
        return removed

    def list_permissions(self, principal: Principal, document_id: str) -> List[Permission]:
        document, _ = authorize_document(self.store, document_id, principal, Action.READ)
        return self.store.list_permissions(document.id)

    def get_user_permission(
        self,
        principal: Principal,
        document_id: str,
        share_token: Optional[str] = None,
        now: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """The caller's own access, or None if they have none or the document is gone."""
        document = self.store.get_document(document_id)
        if document is None:
            return None
        decision = resolve_access(self.store, document, principal, share_token, now)
        if decision.capability is Capability.NONE:
            return None
        return {
            "role": decision.capability.role,
            "is_owner": decision.is_owner,
            "via": decision.rule.value,
        }

    # -- Share links --------------------------------------------------------

    def create_share_link(
        self,
        principal: Principal,
        document_id: str,
        role: str = "viewer",
        expires_in_days: Optional[int] = None,
        now: Optional[int] = None,
    ) -> ShareLink:
        """Create a bearer link granting *role*, optionally expiring after N days."""
        document, _ = authorize_document(self.store, document_id, principal, Action.MANAGE_SHARING)

        _validate_role(role)
        if expires_in_days is not None and expires_in_days <= 0:
            raise ValidationError("expires_in_days must be positive", field="expires_in_days")

        if now is None:
            now = clock.now_ms()
        expires_at = now + expires_in_days * clock.MS_PER_DAY if expires_in_days is not None else None

        for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
            token = secrets.token_urlsafe(settings.share_link_token_bytes)
            try:
                link = self.store.share_links.create(
                    document_id=document.id,
                    token=token,
                    role=role,
                    created_by=principal.principal_id,
                    expires_at=expires_at,
                    created_at=now,
                )
                self.db.commit()
                break
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(
                    "Share token collision, regenerating",
                    extra={"document_id": document.id, "attempt": attempt},
                )
                if attempt == MAX_TOKEN_ATTEMPTS:
                    raise DatabaseError("Could not allocate a unique share token", original_error=e)

        self.db.refresh(link)
        logger.info(
            "Share link created",
            extra={
                "document_id": document.id,
                "link_id": link.id,
                "role": role,
                "expires_at": expires_at,
                "token_hint": token_hint(link.token),
                "created_by": principal.principal_id,
            },
        )
        return link

    def list_share_links(self, principal: Principal, document_id: str) -> List[ShareLink]:
        """All links on the document, expired ones included, for its managers."""
        document, _ = authorize_document(self.store, document_id, principal, Action.MANAGE_SHARING)
        return self.store.list_share_links(document.id)

    def delete_share_link(self, principal: Principal, link_id: str) -> None:
        """Delete a link. Its creator may always do so; others need editor access."""
        link = self.store.get_share_link(link_id)
        if link is None:
            raise ShareLinkNotFoundError()

        if link.created_by != principal.principal_id:
            document = self.store.get_document(link.document_id)
            if document is None:
                raise DocumentNotFoundError(link.document_id)
            decision = resolve_access(self.store, document, principal)
            require_action(decision, Action.MANAGE_SHARING, document.id)

        document_id = link.document_id
        self.store.share_links.delete(link)
        self.db.commit()
        logger.info(
            "Share link deleted",
            extra={"document_id": document_id, "link_id": link_id, "deleted_by": principal.principal_id},
        )

    def get_share_link_by_token(
        self,
        token: str,
        now: Optional[int] = None,
        principal: Optional[Principal] = None,
    ) -> Optional[ShareLink]:
        """Public lookup. Expired links are indistinguishable from missing ones.

        *principal* is only recorded in the lookup log; it never changes the answer.
        """
        link = find_active_share_link(self.store, token, now)
        logger.info(
            "Share link lookup",
            extra={
                "token_hint": token_hint(token),
                "found": link is not None,
                "principal_id": principal.principal_id if principal else None,
            },
        )
        return link
