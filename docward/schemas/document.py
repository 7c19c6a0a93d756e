"""Document schemas."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

MAX_TAGS = 20
MAX_LOOKUP_IDS = 100


def _clean_tags(tags: List[str]) -> List[str]:
    """Trim, drop blanks, de-duplicate preserving order."""
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    if len(seen) > MAX_TAGS:
        raise ValueError(f"At most {MAX_TAGS} tags allowed")
    return seen


class DocumentCreate(BaseModel):
    """Schema for creating a document."""
    title: str = Field("Untitled document", max_length=255)
    initial_content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: List[str] = []

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


class DocumentUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied.

    ``folder_id: null`` removes the document from its folder; omitting the
    field leaves it untouched.
    """
    title: Optional[str] = Field(None, max_length=255)
    initial_content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: Optional[List[str]] = None
    is_starred: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else _clean_tags(v)


class DocumentResponse(BaseModel):
    """Schema for document response."""
    id: str
    title: str
    initial_content: Optional[str] = None
    owner_id: str
    organization_id: Optional[str] = None
    folder_id: Optional[str] = None
    tags: List[str] = []
    is_starred: bool = False
    created_at: int

    class Config:
        from_attributes = True


class DocumentListResponse(BaseModel):
    """Schema for document list response (no content)."""
    id: str
    title: str
    owner_id: str
    organization_id: Optional[str] = None
    folder_id: Optional[str] = None
    tags: List[str] = []
    is_starred: bool = False
    created_at: int

    class Config:
        from_attributes = True


class DocumentLookupRequest(BaseModel):
    """Resolve a batch of ids to display names."""
    ids: List[str] = Field(..., max_length=MAX_LOOKUP_IDS)


class DocumentSummary(BaseModel):
    """Minimal id/name pair used by mention pickers."""
    id: str
    name: str


class AccessResponse(BaseModel):
    """The caller's own resolved access to a document."""
    role: str
    is_owner: bool
    via: str
