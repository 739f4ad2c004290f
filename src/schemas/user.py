"""User schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    """Create a new user."""

    name: str = Field(..., max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    age: int = Field(..., ge=0, le=150)


class UserUpdate(BaseModel):
    """Replace a user's profile fields."""

    name: str = Field(..., max_length=255)
    email: EmailStr = Field(..., max_length=255)
    age: int = Field(..., ge=0, le=150)


class PasswordChange(BaseModel):
    """Change a user's password."""

    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class UserResponse(BaseModel):
    """Public view of a user. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime


class UserEnvelope(BaseModel):
    """Single-user success response."""

    status: Literal["success"] = "success"
    data: UserResponse


class UserPageEnvelope(BaseModel):
    """Paginated list or search response."""

    status: Literal["success"] = "success"
    data: list[UserResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class MessageEnvelope(BaseModel):
    """Success or error response carrying only a message."""

    status: Literal["success", "error"]
    message: str
