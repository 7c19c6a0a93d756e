"""Real-time session authorization schemas."""

from pydantic import BaseModel, Field
from typing import Optional


class SessionAuthRequest(BaseModel):
    """Body of ``POST /auth-session``. ``room`` is the document id."""
    room: str = Field(..., min_length=1, max_length=64)
    token: Optional[str] = Field(None, max_length=256)
