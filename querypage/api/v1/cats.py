"""
Cat list API endpoint.

Demonstrates the pagination helper over a plain model and over a
caller-built statement that joins toys.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from ...database import get_db
from ...domain.common.errors import ValidationError as DomainValidationError
from ...domain.common.query import PaginateConfig, PaginateQuery
from ...domain.filtering import FilterOperator
from ...infra.query import paginate
from ...models.cat import Cat, CatToy
from ...schemas.cat import CatResponse
from ...schemas.paginated import PaginatedResponse
from .paginate_params import parse_paginate_query

logger = logging.getLogger(__name__)
router = APIRouter()

_COMPARABLE = (
    FilterOperator.EQ,
    FilterOperator.NEQ,
    FilterOperator.GT,
    FilterOperator.GTE,
    FilterOperator.LT,
    FilterOperator.LTE,
    FilterOperator.IN,
    FilterOperator.NOTIN,
    FilterOperator.ISNULL,
)
_TEXT = (
    FilterOperator.EQ,
    FilterOperator.NEQ,
    FilterOperator.LIKE,
    FilterOperator.ILIKE,
    FilterOperator.IN,
    FilterOperator.NOTIN,
)

CAT_PAGINATE_CONFIG = PaginateConfig(
    sortable_columns=["id", "name", "color", "age", "created_at"],
    searchable_columns=["name", "color"],
    filterable_columns={
        "name": _TEXT,
        "color": _TEXT,
        "age": _COMPARABLE,
        "is_indoor": (FilterOperator.EQ,),
    },
    default_sort_by=[("id", "ASC")],
)

_toys = aliased(CatToy, name="toys")

CAT_WITH_TOYS_PAGINATE_CONFIG = PaginateConfig(
    # SELECT DISTINCT: ORDER BY may only use selected cat columns
    sortable_columns=["id", "name"],
    searchable_columns=["name", "toys.name"],
    filterable_columns={"toys.name": _TEXT, "color": _TEXT},
    default_sort_by=[("id", "ASC")],
)


@router.get("", response_model=PaginatedResponse[CatResponse])
def list_cats(
    query: PaginateQuery = Depends(parse_paginate_query),
    db: Session = Depends(get_db),
):
    """List cats with pagination, sorting, search and filter expressions."""
    return _paginate_cats(query, Cat, CAT_PAGINATE_CONFIG, db)


@router.get("/with-toys", response_model=PaginatedResponse[CatResponse])
def list_cats_with_toys(
    query: PaginateQuery = Depends(parse_paginate_query),
    db: Session = Depends(get_db),
):
    """List cats that own at least one toy; toy columns are addressed as ``toys.<column>``."""
    stmt = select(Cat).join(Cat.toys.of_type(_toys)).distinct()
    return _paginate_cats(query, stmt, CAT_WITH_TOYS_PAGINATE_CONFIG, db)


def _paginate_cats(query: PaginateQuery, source, config: PaginateConfig, db: Session):
    try:
        result = paginate(query, source, config, db)
        return PaginatedResponse[CatResponse].from_domain(result, CatResponse.model_validate)
    except DomainValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing cats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing cats: {str(e)}")
