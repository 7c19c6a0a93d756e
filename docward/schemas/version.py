"""Version schemas."""

from pydantic import BaseModel, Field
from typing import Optional


class VersionCreate(BaseModel):
    """Schema for creating a version snapshot."""
    content: str
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class VersionResponse(BaseModel):
    """Schema for version response."""
    id: str
    document_id: str
    content: str
    title: str
    created_by: str
    description: Optional[str] = None
    created_at: int

    class Config:
        from_attributes = True
