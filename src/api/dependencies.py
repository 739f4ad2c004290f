"""FastAPI dependencies for the user service."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.database import get_db
from src.repositories.user_repository import SqlAlchemyUserRepository
from src.services.cache_writer import CacheWriter
from src.services.passwords import PasswordHasher, get_password_hasher
from src.services.user_cache import UserCache
from src.services.user_service import UserService


def get_user_cache(request: Request) -> UserCache | None:
    """Process-wide cache built during application startup."""
    return getattr(request.app.state, "user_cache", None)


def get_cache_writer(request: Request) -> CacheWriter | None:
    """Process-wide background cache writer built during application startup."""
    return getattr(request.app.state, "cache_writer", None)


def get_user_repository(
    db: Annotated[Session, Depends(get_db)],
) -> SqlAlchemyUserRepository:
    """Get a repository bound to the request's session."""
    return SqlAlchemyUserRepository(db)


def get_user_service(
    repository: Annotated[SqlAlchemyUserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    cache: Annotated[UserCache | None, Depends(get_user_cache)],
    writer: Annotated[CacheWriter | None, Depends(get_cache_writer)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(repository, hasher, cache=cache, writer=writer)
