"""Reusable FastAPI dependency for pagination query parameters.

Extracts ``page``, ``limit``, ``sortBy``, ``search`` and ``filter`` into
a domain PaginateQuery so every list endpoint parses them the same way
and documents them the same way in OpenAPI.
"""

from __future__ import annotations

import re
from typing import List, Optional

from fastapi import Query, Request

from querypage.domain.common.query import PaginateQuery, SortDirective

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading base-10 integer of *value* (``"10abc"`` -> 10).

    Returns None when there is no numeric prefix.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_sort_by(values: Optional[List[str]]) -> Optional[tuple[SortDirective, ...]]:
    """Turn ``["name:ASC", "age:desc"]`` into ``(("name", "ASC"), ("age", "DESC"))``.

    Entries that do not split into exactly ``column:direction`` are dropped;
    direction validity is checked later, against the endpoint config.
    """
    directives: list[SortDirective] = []
    for value in values or ():
        items = value.split(":")
        if len(items) == 2:
            directives.append((items[0].strip(), items[1].strip().upper()))
    return tuple(directives) or None


def request_path(request: Request) -> str:
    """Scheme, host and path of *request*, without the query string."""
    return str(request.url.replace(query="", fragment=""))


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def parse_paginate_query(
    request: Request,
    page: Optional[str] = Query(
        None,
        description="Page number (1-based)",
        json_schema_extra={"default": 1, "minimum": 1},
        openapi_examples={"first": {"value": "1"}},
    ),
    limit: Optional[str] = Query(
        None,
        description="Items per page; capped by the endpoint's max limit",
        json_schema_extra={"default": 20, "minimum": 1},
        openapi_examples={"default": {"value": "20"}},
    ),
    sort_by: Optional[List[str]] = Query(
        None,
        alias="sortBy",
        description="Sort directive column:ASC|DESC; repeat for multiple columns",
    ),
    search: Optional[str] = Query(
        None,
        description="Search text, column:term[,column:term]",
    ),
    filter: Optional[str] = Query(
        None,
        description="Filter expressions: op(field, value) joined by commas. "
        "Operators: eq, neq, gt, gte, lt, lte, like, ilike, in, notin, isnull",
        openapi_examples={"example": {"value": "eq(field, value), like(field, value)"}},
    ),
) -> PaginateQuery:
    """Build a PaginateQuery from HTTP query parameters."""
    return PaginateQuery(
        path=request_path(request),
        page=parse_int(page),
        limit=parse_int(limit),
        sort_by=parse_sort_by(sort_by),
        search=search or None,
        filter=filter or None,
    )
