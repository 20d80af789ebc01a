"""Pagination calculator shared by every listing operation."""

import math
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from ..database.schema import SQLITE_MAX_INTEGER

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


class Pagination(BaseModel):
    """Pagination metadata returned alongside a page of records."""
    currentPage: int
    totalPages: int
    totalCount: int
    limit: int
    hasNext: bool
    hasPrev: bool


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(value: Any, default: int, maximum: int = SQLITE_MAX_INTEGER) -> int:
    """Parse a query parameter as a positive integer, falling back to default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        value = int(value)
    elif not isinstance(value, int):
        try:
            value = int(str(value).strip())
        except ValueError:
            return default
    return value if 1 <= value <= maximum else default


def page_window(page: Any = None, limit: Any = None) -> PageWindow:
    """
    Resolve raw page/limit parameters into a window.

    Malformed or out-of-range input never fails: page falls back to 1 and
    limit to 20. A page whose skip would not fit in a SQLite integer is
    out of range.

    Args:
        page: 1-based page number (any type, typically a query string value)
        limit: Page size

    Returns:
        PageWindow with a non-negative skip
    """
    limit = _positive_int(limit, DEFAULT_LIMIT)
    page = _positive_int(page, DEFAULT_PAGE, maximum=SQLITE_MAX_INTEGER // limit)
    return PageWindow(page=page, limit=limit)


def paginate(window: PageWindow, total: int) -> Pagination:
    """Build pagination metadata for a window over ``total`` matching records."""
    return Pagination(
        currentPage=window.page,
        totalPages=math.ceil(total / window.limit),
        totalCount=total,
        limit=window.limit,
        hasNext=window.page * window.limit < total,
        hasPrev=window.page > 1,
    )
