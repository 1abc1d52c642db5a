from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRead(BaseModel):
    """User read model."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="Name")
    email: str = Field(..., description="Email")


class UserCreate(BaseModel):
    """Create user payload."""
    name: str = Field(..., min_length=1, max_length=100, description="Name")
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, max_length=32, description="Password")
    password_confirm: str = Field(..., min_length=6, max_length=32, description="Password confirmation")


class UserCreated(BaseModel):
    name: str
    email: str


class UserUpdate(BaseModel):
    """Update user payload."""
    name: str = Field(..., min_length=1, max_length=100, description="Name")
    email: EmailStr = Field(..., description="Email")


class ChangePasswordRequest(BaseModel):
    """Change password payload; the old password must verify."""
    password_old: str = Field(..., min_length=6, max_length=32)
    password_new: str = Field(..., min_length=6, max_length=32)
    password_confirm: str = Field(..., min_length=6, max_length=32)
