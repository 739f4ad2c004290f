"""Query descriptor for listing users, and pagination arithmetic.

Normalization never raises. Malformed paging or sorting input is corrected
to a default instead of rejected:

    page < 1            -> 1
    page > MAX_PAGE     -> MAX_PAGE
    limit < 1           -> 10
    limit > 100         -> 100
    unknown sort field  -> id
    unknown order       -> asc

An age bound of zero or less means "no bound".
"""

from dataclasses import dataclass, field
from enum import StrEnum

from src.domain.user import User

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Largest value a BIGINT column or LIMIT/OFFSET parameter accepts.
MAX_STORE_INT = 2**63 - 1
# Keeps (page - 1) * limit within MAX_STORE_INT.
MAX_PAGE = MAX_STORE_INT // MAX_LIMIT


class SortField(StrEnum):
    """Columns a user list may be ordered by."""

    ID = "id"
    NAME = "name"
    EMAIL = "email"
    AGE = "age"
    CREATED_AT = "created_at"


class SortOrder(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


def normalize_page(page: int | None) -> int:
    if page is None or page < 1:
        return DEFAULT_PAGE
    return min(page, MAX_PAGE)


def normalize_limit(limit: int | None) -> int:
    if limit is None or limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def _parse_enum(enum_cls, raw: str | None, default):
    if raw is None:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        return default


def page_offset(page: int, limit: int) -> int:
    """Row offset of the first item on ``page``."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` rows. Integer math only."""
    pages = total // limit
    if total % limit > 0:
        pages += 1
    return pages


@dataclass(frozen=True)
class UserQuery:
    """Normalized filter, sort and pagination parameters.

    Build instances with :meth:`normalize`; the constructor trusts its input.
    """

    search: str = ""
    age_min: int = 0
    age_max: int = 0
    sort: SortField = SortField.ID
    order: SortOrder = SortOrder.ASC
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def normalize(
        cls,
        *,
        search: str | None = None,
        age_min: int | None = None,
        age_max: int | None = None,
        sort: str | None = None,
        order: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> "UserQuery":
        return cls(
            search=(search or "").strip(),
            age_min=age_min if age_min and age_min > 0 else 0,
            age_max=age_max if age_max and age_max > 0 else 0,
            sort=_parse_enum(SortField, sort, SortField.ID),
            order=_parse_enum(SortOrder, order, SortOrder.ASC),
            page=normalize_page(page),
            limit=normalize_limit(limit),
        )

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.limit)


@dataclass(frozen=True)
class UserPage:
    """One page of users plus the size of the whole match set."""

    users: list[User] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.limit)
