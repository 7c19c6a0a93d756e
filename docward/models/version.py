"""Version model."""

import uuid

from sqlalchemy import Column, Index, String, Text, BigInteger, ForeignKey
from sqlalchemy.orm import relationship

from ..core import clock
from ..database import Base


class Version(Base):
    """Append-only snapshot history.

    Rows are never updated. ``created_at`` is strictly increasing per
    document (see VersionRepository.create), so newest-first is a total order.
    """

    __tablename__ = "versions"
    __table_args__ = (
        Index("ix_versions_document_created", "document_id", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    document_id = Column(String(32), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)

    content = Column(Text, nullable=False)
    title = Column(String(255), nullable=False)
    created_by = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Epoch milliseconds
    created_at = Column(BigInteger, nullable=False, default=lambda: clock.now_ms())

    document = relationship("Document", back_populates="versions")
