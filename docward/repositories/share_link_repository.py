"""Share-link repository. Lookups here are raw: expiry is the caller's concern."""

from typing import List, Optional

from ..models import ShareLink
from ..exceptions import ShareLinkNotFoundError
from .base import BaseRepository


class ShareLinkRepository(BaseRepository[ShareLink]):
    """Repository for share-link rows."""

    model_class = ShareLink
    not_found_error = ShareLinkNotFoundError

    def get_by_id(self, link_id: str) -> ShareLink:
        link = self.get_by_id_optional(link_id)
        if link is None:
            raise ShareLinkNotFoundError()
        return link

    def get_by_token(self, token: str) -> Optional[ShareLink]:
        return self.db.query(ShareLink).filter(ShareLink.token == token).first()

    def list_by_document(self, document_id: str) -> List[ShareLink]:
        return (
            self.db.query(ShareLink)
            .filter(ShareLink.document_id == document_id)
            .order_by(ShareLink.created_at.desc(), ShareLink.id)
            .all()
        )

    def create(
        self,
        document_id: str,
        token: str,
        role: str,
        created_by: str,
        expires_at: Optional[int],
        created_at: int,
    ) -> ShareLink:
        """Insert a link. Raises IntegrityError on token collision."""
        link = ShareLink(
            document_id=document_id,
            token=token,
            role=role,
            created_by=created_by,
            expires_at=expires_at,
            created_at=created_at,
        )
        self.db.add(link)
        self.db.flush()
        return link
