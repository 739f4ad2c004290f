"""Pytest configuration and fixtures."""

import os

# Configure before any src module reads settings.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("CACHE_ENABLED", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from passlib.context import CryptContext  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.api.dependencies import get_cache_writer, get_user_cache  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.repositories.user_repository import SqlAlchemyUserRepository  # noqa: E402
from src.services.cache_writer import CacheWriter  # noqa: E402
from src.services.passwords import PasswordHasher, get_password_hasher  # noqa: E402
from src.services.user_cache import UserCache  # noqa: E402
from src.services.user_service import UserService  # noqa: E402

# Use test database - PostgreSQL in Docker, SQLite locally
if os.environ["DATABASE_URL"].startswith("postgresql"):
    SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"].replace("/userdb", "/userdb_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class InMemoryRedis:
    """Dict-backed stand-in for the redis client calls UserCache makes."""

    def __init__(self):
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int | None] = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value if isinstance(value, bytes) else str(value).encode()
        self.ttls[key] = ex
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def ping(self):
        return True

    def close(self):
        pass


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def hasher():
    """Bcrypt hasher with the minimum work factor to keep tests fast."""
    return PasswordHasher(CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def user_cache(redis_client):
    return UserCache(redis_client, ttl_seconds=300)


@pytest.fixture
def cache_writer():
    writer = CacheWriter(max_pending=100)
    yield writer
    writer.stop()


@pytest.fixture
def repository(db):
    return SqlAlchemyUserRepository(db)


@pytest.fixture
def service(repository, hasher, user_cache, cache_writer):
    return UserService(repository, hasher, cache=user_cache, writer=cache_writer)


@pytest.fixture
def make_user(service):
    """Factory creating users through the service with sensible defaults."""
    counter = {"n": 0}

    def _make_user(name=None, email=None, age=30, password="password123"):
        counter["n"] += 1
        n = counter["n"]
        return service.create_user(
            name or f"User {n}",
            email or f"user{n}@example.com",
            password,
            age,
        )

    return _make_user


@pytest.fixture(scope="function")
def client(db, hasher, user_cache, cache_writer):
    """Create a test client with database and cache overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_user_cache] = lambda: user_cache
    app.dependency_overrides[get_cache_writer] = lambda: cache_writer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
