"""Bearer-token share link."""

import uuid

from sqlalchemy import Column, Index, String, BigInteger, ForeignKey
from sqlalchemy.orm import relationship

from ..core import clock
from ..database import Base


class ShareLink(Base):
    """Grants ``role`` on a document to whoever holds ``token``.

    Expiry is soft: rows past ``expires_at`` stay in the table and every
    reader must treat them as absent.
    """

    __tablename__ = "share_links"
    __table_args__ = (
        Index("ix_share_links_token", "token", unique=True),
        Index("ix_share_links_document_id", "document_id"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    document_id = Column(String(32), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(128), nullable=False)
    role = Column(String(20), nullable=False)  # viewer | commenter | editor

    # Epoch milliseconds; NULL = never expires
    expires_at = Column(BigInteger, nullable=True)

    created_by = Column(String(255), nullable=False)
    created_at = Column(BigInteger, nullable=False, default=lambda: clock.now_ms())

    document = relationship("Document", back_populates="share_links")
