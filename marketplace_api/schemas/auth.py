from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login credentials. The email is matched exactly as given."""
    email: str = Field(..., min_length=1, max_length=320, description="User email")
    password: str = Field(..., min_length=1, description="User password")


class LoginResult(BaseModel):
    """Successful login: the user and a bearer token."""
    email: str = Field(..., description="User email")
    name: str = Field(..., description="User name")
    user_id: UUID = Field(..., description="User ID")
    token: str = Field(..., description="JWT access token (bearer)")
