"""Navigation link construction for paginated responses."""

from __future__ import annotations

from urllib.parse import urlencode

from querypage.domain.common.query import PaginatedLinks, SortDirective


def build_links(
    path: str,
    *,
    page: int,
    limit: int,
    total_pages: int,
    sort_by: tuple[SortDirective, ...] = (),
    search: str | None = None,
    filter_text: str | None = None,
) -> PaginatedLinks:
    """Build first/previous/current/next/last links for *page*.

    Every link repeats the applied limit, sort, search and filter so
    that following it reproduces the same query on another page.
    """
    options: list[tuple[str, str]] = [("limit", str(limit))]
    options.extend(("sortBy", f"{column}:{direction}") for column, direction in sort_by)
    if search:
        options.append(("search", search))
    if filter_text:
        options.append(("filter", filter_text))

    def link(p: int) -> str:
        return f"{path}?{urlencode([('page', str(p)), *options])}"

    return PaginatedLinks(
        first=None if page == 1 else link(1),
        previous=None if page - 1 < 1 else link(page - 1),
        current=link(page),
        next=None if page + 1 > total_pages else link(page + 1),
        last=None if total_pages == 0 or page == total_pages else link(total_pages),
    )
