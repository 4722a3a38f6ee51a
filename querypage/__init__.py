"""
querypage: pagination, sorting, search and filter expressions for
SQLAlchemy-backed list endpoints.
"""
from querypage.domain.common.errors import (
    DomainError,
    FilterSyntaxError,
    UnknownColumnError,
    ValidationError,
)
from querypage.domain.common.query import (
    Paginated,
    PaginateConfig,
    PaginatedLinks,
    PaginatedMeta,
    PaginateQuery,
    SortOrder,
)
from querypage.domain.filtering import FilterExpression, FilterOperator, parse_filter
from querypage.infra.query import paginate

__version__ = "0.1.0"

__all__ = [
    "DomainError",
    "FilterExpression",
    "FilterOperator",
    "FilterSyntaxError",
    "Paginated",
    "PaginateConfig",
    "PaginatedLinks",
    "PaginatedMeta",
    "PaginateQuery",
    "SortOrder",
    "UnknownColumnError",
    "ValidationError",
    "paginate",
    "parse_filter",
]
