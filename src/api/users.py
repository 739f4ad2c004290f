"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from src.api.dependencies import get_user_service
from src.domain.query import MAX_STORE_INT, UserPage, UserQuery
from src.schemas.user import (
    MessageEnvelope,
    PasswordChange,
    UserCreate,
    UserEnvelope,
    UserPageEnvelope,
    UserResponse,
    UserUpdate,
)
from src.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])

Service = Annotated[UserService, Depends(get_user_service)]
UserId = Annotated[int, Path(ge=-MAX_STORE_INT - 1, le=MAX_STORE_INT)]


def parse_int(raw: str | None) -> int | None:
    """Read an integer query parameter, treating garbage as absent.

    Values the store cannot represent count as garbage too.
    """
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    if not -MAX_STORE_INT - 1 <= value <= MAX_STORE_INT:
        return None
    return value


def page_envelope(result: UserPage) -> UserPageEnvelope:
    return UserPageEnvelope(
        data=[UserResponse.model_validate(user) for user in result.users],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(user_data: UserCreate, service: Service):
    """Create a new user."""
    user = service.create_user(user_data.name, user_data.email, user_data.password, user_data.age)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.get("", response_model=UserPageEnvelope)
def list_users(
    service: Service,
    search: str | None = Query(default=None, description="Match name or email"),
    age_min: str | None = Query(default=None, description="Minimum age, inclusive"),
    age_max: str | None = Query(default=None, description="Maximum age, inclusive"),
    sort: str | None = Query(default=None, description="id, name, email, age or created_at"),
    order: str | None = Query(default=None, description="asc or desc"),
    page: str | None = Query(default=None, description="Page number, from 1"),
    limit: str | None = Query(default=None, description="Items per page, at most 100"),
):
    """List users with optional filters, sorting and pagination."""
    query = UserQuery.normalize(
        search=search,
        age_min=parse_int(age_min),
        age_max=parse_int(age_max),
        sort=sort,
        order=order,
        page=parse_int(page),
        limit=parse_int(limit),
    )
    return page_envelope(service.list_users(query))


@router.get("/search", response_model=UserPageEnvelope)
def search_users(
    service: Service,
    q: str = Query(default="", description="Keyword matched against name or email"),
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
):
    """Search users by keyword."""
    result = service.search_users(q, page=parse_int(page), limit=parse_int(limit))
    return page_envelope(result)


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(user_id: UserId, service: Service):
    """Get a single user, served from the cache when possible."""
    return UserEnvelope(data=UserResponse.model_validate(service.get_user(user_id)))


@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(user_id: UserId, user_data: UserUpdate, service: Service):
    """Update a user's name, email and age."""
    user = service.update_user(user_id, user_data.name, user_data.email, user_data.age)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.put("/{user_id}/change-password", response_model=MessageEnvelope)
def change_password(user_id: UserId, password_data: PasswordChange, service: Service):
    """Change a user's password after verifying the old one."""
    service.change_password(user_id, password_data.old_password, password_data.new_password)
    return MessageEnvelope(status="success", message="password changed successfully")


@router.delete("/{user_id}", response_model=MessageEnvelope)
def delete_user(user_id: UserId, service: Service):
    """Delete a user."""
    service.delete_user(user_id)
    return MessageEnvelope(status="success", message="user deleted successfully")
