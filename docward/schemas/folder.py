"""Folder schemas."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


def _validate_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Folder name cannot be empty")
    if '/' in v:
        raise ValueError("Folder name cannot contain '/'")
    return v


class FolderCreate(BaseModel):
    """Create a folder, optionally under a parent."""
    name: str = Field(..., max_length=255)
    parent_id: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)


class FolderUpdate(BaseModel):
    """Rename and/or move. ``parent_id: null`` moves the folder to the root."""
    name: Optional[str] = Field(None, max_length=255)
    parent_id: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _validate_name(v)


class FolderResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    organization_id: Optional[str] = None
    parent_id: Optional[str] = None
    created_at: int

    class Config:
        from_attributes = True
