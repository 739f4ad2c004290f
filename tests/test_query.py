"""Tests for query normalization and pagination arithmetic."""

import pytest

from src.domain.query import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_PAGE,
    MAX_STORE_INT,
    SortField,
    SortOrder,
    UserPage,
    UserQuery,
    total_pages,
)
from src.repositories.query_builder import build_filters, build_ordering, escape_like


class TestTotalPages:
    """Tests for total_pages."""

    @pytest.mark.parametrize(
        ("total", "limit", "expected"),
        [(50, 10, 5), (51, 10, 6), (0, 10, 0), (1, 10, 1), (100, 100, 1), (101, 100, 2), (7, 1, 7)],
    )
    def test_ceiling_division(self, total, limit, expected):
        assert total_pages(total, limit) == expected

    def test_user_page_derives_total_pages(self):
        assert UserPage(users=[], total=51, page=1, limit=10).total_pages == 6


class TestNormalize:
    """Tests for UserQuery.normalize."""

    def test_defaults(self):
        query = UserQuery.normalize()

        assert query == UserQuery(
            search="",
            age_min=0,
            age_max=0,
            sort=SortField.ID,
            order=SortOrder.ASC,
            page=1,
            limit=DEFAULT_LIMIT,
        )

    def test_limit_clamped_to_ceiling(self):
        assert UserQuery.normalize(limit=500).limit == MAX_LIMIT

    @pytest.mark.parametrize("limit", [0, -3])
    def test_limit_below_one_uses_default(self, limit):
        assert UserQuery.normalize(limit=limit).limit == DEFAULT_LIMIT

    @pytest.mark.parametrize("page", [0, -1, -100])
    def test_page_below_one_becomes_one(self, page):
        assert UserQuery.normalize(page=page).page == 1

    def test_huge_page_is_clamped_so_offset_fits(self):
        query = UserQuery.normalize(page=10**30, limit=500)

        assert query.page == MAX_PAGE
        assert query.offset <= MAX_STORE_INT

    def test_unknown_sort_field_falls_back_to_id(self):
        query = UserQuery.normalize(sort="password")

        assert query.sort == SortField.ID
        assert query.order == SortOrder.ASC

    def test_unknown_order_falls_back_to_asc(self):
        assert UserQuery.normalize(sort="age", order="random").order == SortOrder.ASC

    def test_sort_and_order_are_case_insensitive(self):
        query = UserQuery.normalize(sort=" Created_At ", order="DESC")

        assert query.sort == SortField.CREATED_AT
        assert query.order == SortOrder.DESC

    def test_non_positive_age_bounds_are_unset(self):
        query = UserQuery.normalize(age_min=-5, age_max=0)

        assert query.age_min == 0
        assert query.age_max == 0

    def test_search_is_trimmed(self):
        assert UserQuery.normalize(search="  ali  ").search == "ali"

    def test_offset(self):
        assert UserQuery.normalize(page=3, limit=20).offset == 40


class TestQueryBuilder:
    """Tests for the SQL clause builders."""

    def test_no_filters_when_nothing_is_set(self):
        assert build_filters(UserQuery.normalize()) == []

    def test_one_clause_per_predicate(self):
        query = UserQuery.normalize(search="ali", age_min=18, age_max=65)
        assert len(build_filters(query)) == 3

    def test_id_sort_has_no_tie_break(self):
        assert len(build_ordering(SortField.ID, SortOrder.DESC)) == 1

    def test_other_sorts_add_id_tie_break(self):
        assert len(build_ordering(SortField.NAME, SortOrder.ASC)) == 2

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
