"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class CurrentUserResponse(BaseModel):
    """Identity behind the presented bearer token."""

    address: str = Field(..., description="Canonical account address")
    issued_at: datetime = Field(..., description="When the session token was issued")
    expires_at: datetime = Field(..., description="When the session token expires")
