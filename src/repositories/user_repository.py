"""SQLAlchemy implementation of the user repository."""

import logging

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from src.domain.errors import ConflictError, NotFoundError, UnexpectedError
from src.domain.query import SortField, SortOrder, UserQuery, page_offset
from src.domain.user import User
from src.models.user import User as UserRow
from src.repositories.query_builder import build_filters, build_ordering, keyword_filter

logger = logging.getLogger(__name__)

# Drivers raise OverflowError, unwrapped, for parameters outside their integer range.
STORE_ERRORS = (SQLAlchemyError, OverflowError)


def _to_entity(row: UserRow) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        age=row.age,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlAlchemyUserRepository:
    """User persistence backed by a SQLAlchemy session.

    Every write commits immediately. Store failures roll the session back and
    surface as domain errors: unique violations as ConflictError, anything
    else as UnexpectedError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: Exception) -> UnexpectedError:
        self.db.rollback()
        logger.error(f"Database error while trying to {action}: {exc}")
        return UnexpectedError(f"failed to {action}")

    def create(self, user: User) -> None:
        row = UserRow(
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            age=user.age,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Unique constraint rejected insert for {user.email}: {e.orig}")
            raise ConflictError() from e
        except STORE_ERRORS as e:
            raise self._fail("create user", e) from e

        self.db.refresh(row)
        user.id = row.id
        user.created_at = row.created_at
        user.updated_at = row.updated_at

    def get_by_id(self, user_id: int) -> User:
        try:
            row = self.db.query(UserRow).filter(UserRow.id == user_id).first()
        except STORE_ERRORS as e:
            raise self._fail("load user", e) from e
        if row is None:
            raise NotFoundError()
        return _to_entity(row)

    def get_by_email(self, email: str) -> User | None:
        try:
            row = self.db.query(UserRow).filter(UserRow.email == email).first()
        except STORE_ERRORS as e:
            raise self._fail("load user by email", e) from e
        return _to_entity(row) if row else None

    def get_all(self) -> list[User]:
        try:
            rows = self.db.query(UserRow).order_by(UserRow.id).all()
        except STORE_ERRORS as e:
            raise self._fail("list users", e) from e
        return [_to_entity(row) for row in rows]

    def update(self, user: User) -> None:
        try:
            affected = (
                self.db.query(UserRow)
                .filter(UserRow.id == user.id)
                .update(
                    {
                        UserRow.name: user.name,
                        UserRow.email: user.email,
                        UserRow.password_hash: user.password_hash,
                        UserRow.age: user.age,
                        UserRow.updated_at: user.updated_at,
                    },
                    synchronize_session=False,
                )
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError() from e
        except STORE_ERRORS as e:
            raise self._fail("update user", e) from e

        if affected == 0:
            raise NotFoundError()

    def delete(self, user_id: int) -> None:
        try:
            affected = (
                self.db.query(UserRow)
                .filter(UserRow.id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except STORE_ERRORS as e:
            raise self._fail("delete user", e) from e

        if affected == 0:
            raise NotFoundError()

    def _page(
        self, query: Query, sort: SortField, order: SortOrder, page: int, limit: int
    ) -> tuple[list[User], int]:
        # Count first, over the same predicate as the page.
        total = query.order_by(None).count()
        rows = (
            query.order_by(*build_ordering(sort, order))
            .offset(page_offset(page, limit))
            .limit(limit)
            .all()
        )
        return [_to_entity(row) for row in rows], total

    def list_with_filters(self, query: UserQuery) -> tuple[list[User], int]:
        try:
            base = self.db.query(UserRow).filter(*build_filters(query))
            return self._page(base, query.sort, query.order, query.page, query.limit)
        except STORE_ERRORS as e:
            raise self._fail("filter users", e) from e

    def search(self, keyword: str, page: int, limit: int) -> tuple[list[User], int]:
        try:
            base = self.db.query(UserRow).filter(keyword_filter(keyword))
            return self._page(base, SortField.ID, SortOrder.ASC, page, limit)
        except STORE_ERRORS as e:
            raise self._fail("search users", e) from e

    def ping(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except STORE_ERRORS as e:
            raise self._fail("reach the database", e) from e
