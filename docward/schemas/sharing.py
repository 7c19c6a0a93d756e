"""Permission and share-link schemas."""

from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional

Role = Literal["viewer", "commenter", "editor"]

# Upper bound on share-link lifetime accepted from clients.
MAX_EXPIRES_IN_DAYS = 3650


class PermissionGrant(BaseModel):
    """Grant (or change) a user's role on a document."""
    user_id: str
    role: Role

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_id cannot be empty")
        return v


class PermissionResponse(BaseModel):
    id: str
    document_id: str
    user_id: str
    role: Role
    created_at: int

    class Config:
        from_attributes = True


class ShareLinkCreate(BaseModel):
    """Create a bearer link. Omit ``expires_in_days`` for a link that never expires."""
    role: Role = "viewer"
    expires_in_days: Optional[int] = Field(None, gt=0, le=MAX_EXPIRES_IN_DAYS)


class ShareLinkResponse(BaseModel):
    """Full link record, only shown to principals who manage sharing."""
    id: str
    document_id: str
    token: str
    role: Role
    expires_at: Optional[int] = None
    created_by: str
    created_at: int

    class Config:
        from_attributes = True


class ShareLinkPublic(BaseModel):
    """What anyone holding a token may learn about it."""
    document_id: str
    role: Role
    expires_at: Optional[int] = None

    class Config:
        from_attributes = True
