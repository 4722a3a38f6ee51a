"""Pydantic schemas for paginated list responses.

The wire format uses camelCase keys (``itemsPerPage``, ``totalItems``,
``sortBy``...) so clients see the same envelope regardless of the
endpoint.  Python code keeps using snake_case field names.
"""

from typing import Callable, Generic, List, Optional, Self, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..domain.common.query import Paginated

T = TypeVar("T")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginatedMetaResponse(_CamelModel):
    items_per_page: int
    total_items: int
    current_page: int
    total_pages: int
    sort_by: List[Tuple[str, str]] = []
    search: Optional[str] = None
    filter: Optional[str] = None


class PaginatedLinksResponse(_CamelModel):
    first: Optional[str] = None
    previous: Optional[str] = None
    current: str
    next: Optional[str] = None
    last: Optional[str] = None


class PaginatedResponse(_CamelModel, Generic[T]):
    """Response envelope: ``{"data": [...], "meta": {...}, "links": {...}}``."""

    data: List[T]
    meta: PaginatedMetaResponse
    links: PaginatedLinksResponse

    @classmethod
    def from_domain(cls, page: Paginated, item: Callable[[object], T]) -> Self:
        """Map a domain Paginated to the HTTP envelope, converting rows with *item*."""
        meta = page.meta
        links = page.links
        return cls(
            data=[item(row) for row in page.data],
            meta=PaginatedMetaResponse(
                items_per_page=meta.items_per_page,
                total_items=meta.total_items,
                current_page=meta.current_page,
                total_pages=meta.total_pages,
                sort_by=list(meta.sort_by),
                search=meta.search,
                filter=meta.filter,
            ),
            links=PaginatedLinksResponse(
                first=links.first,
                previous=links.previous,
                current=links.current,
                next=links.next,
                last=links.last,
            ),
        )
