"""Translate a UserQuery into SQLAlchemy filter and ordering clauses.

Only enum members reach ``ORDER BY`` and every user-supplied value is a bound
parameter, so no caller input is ever spliced into SQL text.
"""

from sqlalchemy import ColumnElement, UnaryExpression, or_

from src.domain.query import SortField, SortOrder, UserQuery
from src.models.user import User

SORT_COLUMNS = {
    SortField.ID: User.id,
    SortField.NAME: User.name,
    SortField.EMAIL: User.email,
    SortField.AGE: User.age,
    SortField.CREATED_AT: User.created_at,
}

LIKE_ESCAPE = "\\"


def escape_like(keyword: str) -> str:
    """Escape LIKE wildcards so the keyword matches literally."""
    return (
        keyword.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def keyword_filter(keyword: str) -> ColumnElement[bool]:
    """Case-insensitive substring match against name or email."""
    pattern = f"%{escape_like(keyword)}%"
    return or_(
        User.name.ilike(pattern, escape=LIKE_ESCAPE),
        User.email.ilike(pattern, escape=LIKE_ESCAPE),
    )


def build_filters(query: UserQuery) -> list[ColumnElement[bool]]:
    """Conditions to AND together. Absent predicates are left out entirely."""
    conditions: list[ColumnElement[bool]] = []
    if query.search:
        conditions.append(keyword_filter(query.search))
    if query.age_min > 0:
        conditions.append(User.age >= query.age_min)
    if query.age_max > 0:
        conditions.append(User.age <= query.age_max)
    return conditions


def build_ordering(sort: SortField, order: SortOrder) -> list[UnaryExpression]:
    """ORDER BY clauses, with id ascending as tie-break for non-id sorts."""
    column = SORT_COLUMNS[sort]
    primary = column.desc() if order == SortOrder.DESC else column.asc()
    if sort == SortField.ID:
        return [primary]
    return [primary, User.id.asc()]
