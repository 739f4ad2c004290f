"""Redis look-aside cache for single users."""

import logging

import redis
from pydantic import TypeAdapter

from src.config import Settings, get_settings
from src.domain.user import PublicUser

logger = logging.getLogger(__name__)

_public_user_adapter = TypeAdapter(PublicUser)


def user_cache_key(user_id: int) -> str:
    return f"user:{user_id}"


class UserCache:
    """Stores the public view of users under ``user:{id}`` with a fixed TTL.

    Only PublicUser is ever written, so password hashes never leave the
    database. Errors from Redis propagate; callers decide how to fail open.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def get(self, user_id: int) -> PublicUser | None:
        """Return the cached user, or None on a miss."""
        raw = self.client.get(user_cache_key(user_id))
        if raw is None:
            return None
        return _public_user_adapter.validate_json(raw)

    def set(self, user: PublicUser) -> None:
        self.client.set(
            user_cache_key(user.id),
            _public_user_adapter.dump_json(user),
            ex=self.ttl_seconds,
        )

    def delete(self, user_id: int) -> None:
        self.client.delete(user_cache_key(user_id))

    def ping(self) -> bool:
        return bool(self.client.ping())

    def close(self) -> None:
        self.client.close()


def create_user_cache(settings: Settings | None = None) -> UserCache | None:
    """Build the cache from settings, or None when caching is disabled.

    Every Redis call, foreground or background, gets its own socket timeout.
    """
    settings = settings or get_settings()
    if not settings.cache_enabled:
        logger.info("User cache disabled; all reads go to the database")
        return None
    client = redis.from_url(
        settings.redis_url,
        socket_timeout=settings.cache_socket_timeout_seconds,
        socket_connect_timeout=settings.cache_socket_timeout_seconds,
    )
    return UserCache(client, ttl_seconds=settings.cache_ttl_seconds)
