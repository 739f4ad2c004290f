"""User service: commands, queries and the cache-aside read path."""

import logging

from opentelemetry import trace
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from src.domain.errors import ConflictError, ValidationError
from src.domain.query import UserPage, UserQuery, normalize_limit, normalize_page
from src.domain.repository import UserRepository
from src.domain.user import Hasher, PublicUser, User, validate_new_user
from src.services.cache_writer import CacheWriter
from src.services.user_cache import UserCache

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class UserService:
    """Entry point for every user operation.

    By-id reads consult the cache first and fall back to the repository,
    repopulating the cache in the background. Update, delete and password
    changes invalidate the cached entry in the background once the store
    write has succeeded. Lists and searches are never cached.

    The cache is optional (``cache=None``) and never a source of failure:
    errors reading it count as a miss, errors writing it are logged by the
    writer.
    """

    def __init__(
        self,
        repository: UserRepository,
        hasher: Hasher,
        cache: UserCache | None = None,
        writer: CacheWriter | None = None,
    ):
        self.repository = repository
        self.hasher = hasher
        self.cache = cache
        self.writer = writer

    # -- cache helpers -------------------------------------------------------

    def _read_cache(self, user_id: int) -> PublicUser | None:
        if self.cache is None:
            return None
        with tracer.start_as_current_span("cache.get_user"):
            try:
                return self.cache.get(user_id)
            except (RedisError, PydanticValidationError) as e:
                logger.warning(f"Cache read failed for user {user_id}, treating as miss: {e}")
                return None

    def _populate_cache(self, user: PublicUser) -> None:
        if self.cache is None or self.writer is None:
            return
        self.writer.submit(f"set user:{user.id}", self.cache.set, user)

    def _invalidate_cache(self, user_id: int) -> None:
        if self.cache is None or self.writer is None:
            return
        self.writer.submit(f"delete user:{user_id}", self.cache.delete, user_id)

    def _ensure_email_free(self, email: str, user_id: int | None = None) -> None:
        existing = self.repository.get_by_email(email)
        if existing is not None and existing.id != user_id:
            raise ConflictError()

    # -- commands ------------------------------------------------------------

    def create_user(self, name: str, email: str, password: str, age: int) -> User:
        """Validate, hash and insert a new user.

        The by-email lookup is only a pre-check; a concurrent insert that
        slips past it is still rejected by the unique constraint.
        """
        with tracer.start_as_current_span("UserService.create_user"):
            name, email, password, age = validate_new_user(name, email, password, age)
            self._ensure_email_free(email)
            user = User.create(name, email, password, age, self.hasher)
            self.repository.create(user)
            logger.info(f"Created user {user.id}")
            return user

    def update_user(self, user_id: int, name: str, email: str, age: int) -> User:
        with tracer.start_as_current_span("UserService.update_user"):
            user = self.repository.get_by_id(user_id)
            previous_email = user.email
            user.update_profile(name, email, age)
            if user.email != previous_email:
                self._ensure_email_free(user.email, user_id)
            self.repository.update(user)
            self._invalidate_cache(user_id)
            logger.info(f"Updated user {user_id}")
            return user

    def change_password(self, user_id: int, old_password: str, new_password: str) -> None:
        with tracer.start_as_current_span("UserService.change_password"):
            user = self.repository.get_by_id(user_id)
            user.change_password(old_password, new_password, self.hasher)
            self.repository.update(user)
            self._invalidate_cache(user_id)
            logger.info(f"Changed password for user {user_id}")

    def delete_user(self, user_id: int) -> None:
        with tracer.start_as_current_span("UserService.delete_user"):
            self.repository.delete(user_id)
            self._invalidate_cache(user_id)
            logger.info(f"Deleted user {user_id}")

    # -- queries -------------------------------------------------------------

    def get_user(self, user_id: int) -> PublicUser:
        with tracer.start_as_current_span("UserService.get_user"):
            cached = self._read_cache(user_id)
            if cached is not None:
                logger.debug(f"Cache HIT for user {user_id}")
                return cached

            logger.debug(f"Cache MISS for user {user_id}")
            with tracer.start_as_current_span("repository.get_by_id"):
                user = self.repository.get_by_id(user_id)

            public = user.to_public()
            self._populate_cache(public)
            return public

    def list_users(self, query: UserQuery) -> UserPage:
        with tracer.start_as_current_span("UserService.list_users"):
            users, total = self.repository.list_with_filters(query)
            return UserPage(users=users, total=total, page=query.page, limit=query.limit)

    def search_users(
        self, keyword: str, page: int | None = None, limit: int | None = None
    ) -> UserPage:
        with tracer.start_as_current_span("UserService.search_users"):
            keyword = keyword.strip()
            if not keyword:
                raise ValidationError("search keyword is required")
            page = normalize_page(page)
            limit = normalize_limit(limit)
            users, total = self.repository.search(keyword, page, limit)
            return UserPage(users=users, total=total, page=page, limit=limit)
