"""Document model."""

import uuid

from sqlalchemy import Column, Index, String, Text, Boolean, BigInteger, ForeignKey, JSON
from sqlalchemy.orm import relationship

from ..core import clock
from ..database import Base


class Document(Base):
    """Main documents table.

    The row is the root of authority: permissions, share links and versions
    have no meaning without it and are deleted with it.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_owner_id", "owner_id"),
        Index("ix_documents_organization_id", "organization_id"),
        Index("ix_documents_folder_id", "folder_id"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    title = Column(String(255), nullable=False)
    initial_content = Column(Text, nullable=True)

    # Immutable after creation: no update path writes this column.
    owner_id = Column(String(255), nullable=False)
    organization_id = Column(String(255), nullable=True)

    folder_id = Column(String(32), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)
    tags = Column(JSON, default=list)
    is_starred = Column(Boolean, nullable=False, default=False)

    # Epoch milliseconds
    created_at = Column(BigInteger, nullable=False, default=lambda: clock.now_ms())

    permissions = relationship("Permission", back_populates="document", cascade="all, delete-orphan")
    share_links = relationship("ShareLink", back_populates="document", cascade="all, delete-orphan")
    versions = relationship("Version", back_populates="document", cascade="all, delete-orphan")
    folder = relationship("Folder", back_populates="documents")
