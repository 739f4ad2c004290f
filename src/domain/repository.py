"""Persistence contract for users.

The service depends on this Protocol only; the SQLAlchemy implementation in
``src.repositories`` satisfies it structurally.
"""

from typing import Protocol

from src.domain.query import UserQuery
from src.domain.user import User


class UserRepository(Protocol):
    """Contract for user persistence. Each call is atomic on its own."""

    def create(self, user: User) -> None:
        """Insert ``user`` and set its generated id. Raises ConflictError."""
        ...

    def get_by_id(self, user_id: int) -> User:
        """Raises NotFoundError when absent."""
        ...

    def get_by_email(self, email: str) -> User | None: ...

    def get_all(self) -> list[User]: ...

    def update(self, user: User) -> None:
        """Replace the mutable fields. Raises NotFoundError or ConflictError."""
        ...

    def delete(self, user_id: int) -> None:
        """Hard delete. Raises NotFoundError when no row matched."""
        ...

    def list_with_filters(self, query: UserQuery) -> tuple[list[User], int]: ...

    def search(self, keyword: str, page: int, limit: int) -> tuple[list[User], int]: ...

    def ping(self) -> None: ...
