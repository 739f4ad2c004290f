"""Pydantic schemas for API requests and responses."""

from src.schemas.user import (
    MessageEnvelope,
    PasswordChange,
    UserCreate,
    UserEnvelope,
    UserPageEnvelope,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "UserCreate",
    "UserUpdate",
    "PasswordChange",
    "UserResponse",
    "UserEnvelope",
    "UserPageEnvelope",
    "MessageEnvelope",
]
