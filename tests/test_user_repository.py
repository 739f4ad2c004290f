"""Tests for the SQLAlchemy user repository and the filter engine."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from src.domain.errors import ConflictError, NotFoundError, UnexpectedError
from src.domain.query import UserQuery
from src.domain.user import User


def new_user(name, email, age=30):
    now = datetime.now(UTC)
    return User(
        name=name,
        email=email,
        password_hash="$2b$04$notarealhashnotarealhashnotarealhashnotarealhas",
        age=age,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def people(repository):
    """Seed a small, varied population."""
    rows = [
        ("Alice", "alice@example.com", 25),
        ("Bob", "bob@work.org", 35),
        ("Carol", "carol@example.com", 30),
        ("Dave", "dave@work.org", 45),
        ("Eve", "eve@example.com", 35),
        ("Mallory", "mal_lory@example.com", 60),
    ]
    users = []
    for name, email, age in rows:
        user = new_user(name, email, age)
        repository.create(user)
        users.append(user)
    return users


class TestCrud:
    """Tests for single-row operations."""

    def test_create_assigns_id(self, repository):
        user = new_user("Alice", "alice@example.com")
        repository.create(user)

        assert user.id is not None
        assert repository.get_by_id(user.id).email == "alice@example.com"

    def test_create_duplicate_email(self, repository):
        repository.create(new_user("Alice", "alice@example.com"))

        with pytest.raises(ConflictError):
            repository.create(new_user("Alice 2", "alice@example.com"))

        # The session is usable after the failed insert.
        assert repository.get_by_email("alice@example.com") is not None

    def test_get_by_id_missing(self, repository):
        with pytest.raises(NotFoundError):
            repository.get_by_id(404)

    def test_get_by_email_missing_is_none(self, repository):
        assert repository.get_by_email("nobody@example.com") is None

    def test_update(self, repository):
        user = new_user("Alice", "alice@example.com")
        repository.create(user)

        user.name = "Alice Updated"
        user.age = 26
        repository.update(user)

        stored = repository.get_by_id(user.id)
        assert stored.name == "Alice Updated"
        assert stored.age == 26

    def test_update_missing_row(self, repository):
        user = new_user("Ghost", "ghost@example.com")
        user.id = 404

        with pytest.raises(NotFoundError):
            repository.update(user)

    def test_update_to_taken_email(self, repository):
        repository.create(new_user("Alice", "alice@example.com"))
        bob = new_user("Bob", "bob@example.com")
        repository.create(bob)

        bob.email = "alice@example.com"
        with pytest.raises(ConflictError):
            repository.update(bob)

    def test_delete(self, repository):
        user = new_user("Alice", "alice@example.com")
        repository.create(user)

        repository.delete(user.id)

        with pytest.raises(NotFoundError):
            repository.get_by_id(user.id)

    def test_delete_missing_row(self, repository):
        with pytest.raises(NotFoundError):
            repository.delete(404)

    def test_get_all_ordered_by_id(self, repository, people):
        assert [u.id for u in repository.get_all()] == sorted(u.id for u in people)

    def test_store_failure_is_unexpected(self, repository, db):
        with patch.object(db, "query", side_effect=OperationalError("SELECT", {}, Exception("gone"))):
            with pytest.raises(UnexpectedError):
                repository.get_by_id(1)

    def test_driver_overflow_is_unexpected(self, repository, db):
        with patch.object(db, "query", side_effect=OverflowError("Python int too large")):
            with pytest.raises(UnexpectedError):
                repository.list_with_filters(UserQuery.normalize())

    def test_ping(self, repository):
        repository.ping()


class TestListWithFilters:
    """Tests for filtering, sorting and paginating."""

    def test_no_filters_returns_everyone_by_id(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize())

        assert total == 6
        assert [u.id for u in users] == sorted(u.id for u in people)

    def test_age_range_is_inclusive(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize(age_min=25, age_max=35))

        assert total == 4
        assert all(25 <= u.age <= 35 for u in users)

    def test_omitting_age_max_removes_upper_bound(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize(age_min=35))

        assert total == 4
        assert sorted(u.age for u in users) == [35, 35, 45, 60]

    def test_zero_age_bound_is_unset(self, repository, people):
        _, total = repository.list_with_filters(UserQuery.normalize(age_min=0, age_max=0))
        assert total == 6

    def test_keyword_matches_name_or_email_case_insensitively(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize(search="WORK"))

        assert total == 2
        assert {u.name for u in users} == {"Bob", "Dave"}

    def test_keyword_combines_with_age(self, repository, people):
        users, total = repository.list_with_filters(
            UserQuery.normalize(search="example", age_min=30)
        )

        assert total == 3
        assert {u.name for u in users} == {"Carol", "Eve", "Mallory"}

    def test_keyword_wildcards_match_literally(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize(search="_"))

        assert total == 1
        assert users[0].name == "Mallory"

        _, total = repository.list_with_filters(UserQuery.normalize(search="%"))
        assert total == 0

    def test_sort_by_name_desc(self, repository, people):
        users, _ = repository.list_with_filters(UserQuery.normalize(sort="name", order="desc"))

        assert [u.name for u in users] == ["Mallory", "Eve", "Dave", "Carol", "Bob", "Alice"]

    def test_ties_are_broken_by_id(self, repository, people):
        users, _ = repository.list_with_filters(UserQuery.normalize(sort="age", order="desc"))

        ages = [u.age for u in users]
        assert ages == [60, 45, 35, 35, 30, 25]
        bob, eve = users[2], users[3]
        assert (bob.name, eve.name) == ("Bob", "Eve")
        assert bob.id < eve.id

    def test_unknown_sort_field_falls_back_to_id_asc(self, repository, people):
        users, _ = repository.list_with_filters(
            UserQuery.normalize(sort="password", order="sideways")
        )

        assert [u.id for u in users] == sorted(u.id for u in people)

    def test_pagination_window_and_total(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize(page=2, limit=4))

        assert total == 6
        assert [u.id for u in users] == sorted(u.id for u in people)[4:]

    def test_page_past_the_end_is_empty(self, repository, people):
        users, total = repository.list_with_filters(UserQuery.normalize(page=5, limit=4))

        assert users == []
        assert total == 6


class TestSearch:
    """Tests for keyword search."""

    def test_search_by_name(self, repository, people):
        users, total = repository.search("car", page=1, limit=10)

        assert total == 1
        assert users[0].name == "Carol"

    def test_search_by_email_domain(self, repository, people):
        users, total = repository.search("example.com", page=1, limit=2)

        assert total == 4
        assert len(users) == 2
        assert users[0].id < users[1].id

    def test_search_no_match(self, repository, people):
        users, total = repository.search("zzz", page=1, limit=10)

        assert users == []
        assert total == 0
