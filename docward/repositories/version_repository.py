"""Version repository for database operations."""

from typing import List, Optional

from ..core import clock
from ..models import Version
from ..schemas.version import VersionCreate
from ..exceptions import VersionNotFoundError
from .base import BaseRepository


class VersionRepository(BaseRepository[Version]):
    """Repository for append-only version snapshots."""

    model_class = Version
    not_found_error = VersionNotFoundError

    def create(
        self,
        document_id: str,
        version: VersionCreate,
        created_by: str,
        now: Optional[int] = None,
    ) -> Version:
        """Append a snapshot stamped at *now* (the current time by default).

        created_at is bumped past the latest snapshot of the same document
        when the clock has not advanced, keeping per-document order strict.
        """
        created_at = now if now is not None else clock.now_ms()
        latest = self.get_latest(document_id)
        if latest is not None and latest.created_at >= created_at:
            created_at = latest.created_at + 1

        db_version = Version(
            document_id=document_id,
            content=version.content,
            title=version.title,
            description=version.description,
            created_by=created_by,
            created_at=created_at,
        )
        self.db.add(db_version)
        self.db.flush()
        self.db.refresh(db_version)
        return db_version

    # get_by_id and get_by_id_optional are inherited from BaseRepository.

    def get_by_document(self, document_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Version]:
        """Versions for a document, newest first."""
        query = self.db.query(Version).filter(
            Version.document_id == document_id
        ).order_by(Version.created_at.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_latest(self, document_id: str) -> Optional[Version]:
        """Get latest version for a document."""
        return self.db.query(Version).filter(
            Version.document_id == document_id
        ).order_by(Version.created_at.desc()).first()
