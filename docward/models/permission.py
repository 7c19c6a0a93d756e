"""Explicit per-user grant on a document."""

import uuid

from sqlalchemy import Column, Index, String, BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core import clock
from ..database import Base


class Permission(Base):
    """One role for one user on one document.

    The (document_id, user_id) unique constraint is what keeps concurrent
    grants from producing duplicate rows.
    """

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_permissions_document_user"),
        Index("ix_permissions_user_id", "user_id"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    document_id = Column(String(32), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # viewer | commenter | editor
    created_at = Column(BigInteger, nullable=False, default=lambda: clock.now_ms())

    document = relationship("Document", back_populates="permissions")
