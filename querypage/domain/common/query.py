"""Pagination request, configuration, and result types.

These types express pagination intent in domain terms, independent of
any persistence mechanism.  The infra layer translates them into
SQLAlchemy ORDER BY / WHERE / LIMIT / OFFSET clauses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Mapping, Sequence, TypeVar

from querypage.domain.filtering.operators import FilterOperator

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: str) -> SortOrder | None:
        """Return the matching order, or None for anything but ASC/DESC."""
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


# (column, direction) as received from ``sortBy=column:DIRECTION``
SortDirective = tuple[str, str]


# ---------------------------------------------------------------------------
# Request & configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaginateQuery:
    """Pagination parameters extracted from an inbound request."""

    path: str
    page: int | None = None
    limit: int | None = None
    sort_by: tuple[SortDirective, ...] | None = None
    search: str | None = None
    filter: str | None = None


@dataclass
class PaginateConfig:
    """Per-endpoint constraints on what a request may ask for.

    Column allowlists are optional; ``None`` means "any column the
    statement can resolve".  ``default_limit`` / ``max_limit`` fall back
    to the values in ``Settings`` when unset.
    """

    sortable_columns: Sequence[str] | None = None
    searchable_columns: Sequence[str] | None = None
    filterable_columns: Mapping[str, Sequence[FilterOperator]] | None = None
    default_sort_by: Sequence[SortDirective] | None = None
    default_limit: int | None = None
    max_limit: int | None = None
    where: Mapping[str, Any] | Sequence[Any] | None = None


# ---------------------------------------------------------------------------
# Pagination window
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageWindow:
    """Normalized (page, limit) pair."""

    page: int
    limit: int

    @classmethod
    def resolve(
        cls,
        page: int | None,
        limit: int | None,
        *,
        default_limit: int,
        max_limit: int,
    ) -> PageWindow:
        """Clamp raw request values into a usable window.

        Missing, zero or negative pages become 1.  Missing or non-positive
        limits take the default, and the result never exceeds ``max_limit``.
        """
        resolved_page = page if page and page > 0 else 1
        resolved_limit = limit if limit and limit > 0 else default_limit
        return cls(page=resolved_page, limit=min(resolved_limit, max_limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total_items: int) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(total_items / self.limit)


# ---------------------------------------------------------------------------
# Result envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaginatedMeta:
    items_per_page: int
    total_items: int
    current_page: int
    total_pages: int
    sort_by: tuple[SortDirective, ...] = ()
    search: str | None = None
    filter: str | None = None


@dataclass(frozen=True)
class PaginatedLinks:
    current: str
    first: str | None = None
    previous: str | None = None
    next: str | None = None
    last: str | None = None


@dataclass
class Paginated(Generic[T]):
    """One page of rows plus navigation metadata."""

    data: list[T]
    meta: PaginatedMeta
    links: PaginatedLinks = field(default_factory=lambda: PaginatedLinks(current=""))


__all__ = [
    "SortOrder",
    "SortDirective",
    "PaginateQuery",
    "PaginateConfig",
    "PageWindow",
    "PaginatedMeta",
    "PaginatedLinks",
    "Paginated",
]
