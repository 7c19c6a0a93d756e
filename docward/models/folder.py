"""Folder model."""

import uuid

from sqlalchemy import Column, Index, String, BigInteger, ForeignKey
from sqlalchemy.orm import relationship

from ..core import clock
from ..database import Base


class Folder(Base):
    """Owner-scoped folder tree. Folders carry no sharing model of their own."""

    __tablename__ = "folders"
    __table_args__ = (
        Index("ix_folders_owner_id", "owner_id"),
        Index("ix_folders_organization_id", "organization_id"),
        Index("ix_folders_parent_id", "parent_id"),
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(255), nullable=False)
    owner_id = Column(String(255), nullable=False)
    organization_id = Column(String(255), nullable=True)
    parent_id = Column(String(32), ForeignKey("folders.id"), nullable=True)
    created_at = Column(BigInteger, nullable=False, default=lambda: clock.now_ms())

    documents = relationship("Document", back_populates="folder")
