"""SQLAlchemy query builder for paginated list endpoints.

Translates a domain PaginateQuery + PaginateConfig into SQLAlchemy
ORDER BY, WHERE (config ``where``, ILIKE search, filter expressions)
and LIMIT/OFFSET clauses, executes the statement, and packages the
rows into a ``Paginated`` envelope with navigation links.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from sqlalchemy import String, and_, cast, func, inspect, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement, FromClause, Join, Select

from querypage.config import settings
from querypage.domain.common.errors import UnknownColumnError
from querypage.domain.common.links import build_links
from querypage.domain.common.query import (
    PageWindow,
    Paginated,
    PaginateConfig,
    PaginatedMeta,
    PaginateQuery,
    SortDirective,
    SortOrder,
)
from querypage.domain.filtering import FilterExpression, FilterOperator, parse_filter

logger = logging.getLogger(__name__)

# Python types a textual filter value is converted to before binding.
_NUMERIC_TYPES = (int, float, Decimal)


# ── Public API ──────────────────────────────────────────────────────────


def paginate(
    query: PaginateQuery,
    source: Any,
    config: PaginateConfig,
    session: Session,
) -> Paginated:
    """Run *source* as a paginated, sorted, searched and filtered query.

    *source* is either a mapped model class or a ``Select`` the caller
    has already started (joins, extra columns, DISTINCT, ...).  Issues
    exactly two statements: a count and the windowed fetch.
    """
    stmt = to_statement(source)
    window = PageWindow.resolve(
        query.page,
        query.limit,
        default_limit=config.default_limit or settings.paginate_default_limit,
        max_limit=config.max_limit or settings.paginate_max_limit,
    )
    sort_by = resolve_sort(stmt, query.sort_by, config)

    stmt = apply_where(stmt, config.where)
    stmt = apply_search(stmt, query.search, config)
    stmt = apply_filters(stmt, parse_filter(query.filter), config)

    total_items = count_rows(session, stmt)
    stmt = apply_sort(stmt, sort_by)
    stmt = stmt.offset(window.offset).limit(window.limit)
    items = fetch_rows(session, stmt)

    total_pages = window.total_pages(total_items)
    meta = PaginatedMeta(
        items_per_page=window.limit,
        total_items=total_items,
        current_page=window.page,
        total_pages=total_pages,
        sort_by=sort_by,
        search=query.search,
        filter=query.filter,
    )
    links = build_links(
        query.path,
        page=window.page,
        limit=window.limit,
        total_pages=total_pages,
        sort_by=sort_by,
        search=query.search,
        filter_text=query.filter,
    )
    return Paginated(data=items, meta=meta, links=links)


def to_statement(source: Any) -> Select:
    """Return *source* as a Select; mapped classes become ``select(Model)``."""
    if isinstance(source, Select):
        return source
    return select(source)


def resolve_column(stmt: Select, name: str) -> Any | None:
    """Resolve a (possibly ``alias.column``) name against *stmt*.

    Plain names resolve against the primary entity: the mapped class
    if the statement selects one, otherwise the first FROM element.
    Dotted names resolve against the FROM element (table, alias, or
    aliased entity inside a JOIN) whose name matches the prefix.
    """
    parts = [p.replace('"', "").strip() for p in name.split(".")]
    if not all(parts):
        return None

    if len(parts) == 1:
        entity = _primary_entity(stmt)
        if entity is not None:
            attr = _entity_column(entity, parts[0])
            if attr is not None:
                return attr
        froms = _flat_froms(stmt)
        return froms[0].c.get(parts[0]) if froms else None

    alias, column = parts[0], ".".join(parts[1:])
    for from_ in _flat_froms(stmt):
        if getattr(from_, "name", None) == alias:
            return from_.c.get(column)
    return None


def resolve_sort(
    stmt: Select,
    requested: tuple[SortDirective, ...] | None,
    config: PaginateConfig,
) -> tuple[SortDirective, ...]:
    """Keep the sort directives that are valid for *stmt* and *config*."""
    applied: list[SortDirective] = []
    for column, direction in requested or ():
        order = SortOrder.parse(direction)
        if order is None:
            logger.debug("Dropping sort %s:%s: direction must be ASC or DESC", column, direction)
            continue
        if config.sortable_columns is not None and column not in config.sortable_columns:
            logger.debug("Dropping sort on %s: not a sortable column", column)
            continue
        if resolve_column(stmt, column) is None:
            logger.debug("Dropping sort on %s: column not found", column)
            continue
        applied.append((column, order.value))

    if not applied and config.default_sort_by:
        applied = [(column, SortOrder(direction.upper()).value) for column, direction in config.default_sort_by]
    return tuple(applied)


def apply_sort(stmt: Select, sort_by: tuple[SortDirective, ...]) -> Select:
    """Add one ORDER BY term per directive, in order."""
    for column, direction in sort_by:
        col = resolve_column(stmt, column)
        if col is None:
            raise UnknownColumnError(column)
        stmt = stmt.order_by(col.asc() if direction == SortOrder.ASC.value else col.desc())
    return stmt


def apply_where(stmt: Select, where: Mapping[str, Any] | Any | None) -> Select:
    """AND the endpoint's fixed conditions into WHERE."""
    if where is None:
        return stmt
    if isinstance(where, Mapping):
        for name, value in where.items():
            col = resolve_column(stmt, name)
            if col is None:
                raise UnknownColumnError(name)
            stmt = stmt.where(col == value)
        return stmt
    if isinstance(where, ColumnElement):
        return stmt.where(where)
    return stmt.where(*where)


def apply_search(stmt: Select, search: str | None, config: PaginateConfig) -> Select:
    """OR together ILIKE predicates for ``col:term[,col:term]`` search text."""
    if not search:
        return stmt
    logger.debug("Search: %s", search)

    if ":" not in search and config.searchable_columns:
        terms = [(column, search) for column in config.searchable_columns]
    else:
        terms = []
        for part in search.split(","):
            column, sep, term = part.partition(":")
            if not sep or not term:
                continue
            terms.append((column.strip(), term))

    clauses = []
    for column, term in terms:
        if config.searchable_columns is not None and column not in config.searchable_columns:
            logger.debug("Skipping search on %s: not a searchable column", column)
            continue
        col = resolve_column(stmt, column)
        if col is None:
            logger.debug("Skipping search on %s: column not found", column)
            continue
        target = col if isinstance(_column_type(col), String) else cast(col, String)
        clauses.append(target.ilike(f"%{term}%"))

    if not clauses:
        return stmt
    return stmt.where(or_(*clauses))


def apply_filters(
    stmt: Select,
    expressions: list[FilterExpression],
    config: PaginateConfig,
) -> Select:
    """AND one predicate per filter expression into WHERE."""
    clauses = []
    for expr in expressions:
        if config.filterable_columns is not None:
            allowed = config.filterable_columns.get(expr.field)
            if allowed is None or expr.operator not in allowed:
                logger.debug(
                    "Dropping filter %s(%s): not allowed by filterable columns",
                    expr.operator.value,
                    expr.field,
                )
                continue
        col = resolve_column(stmt, expr.field)
        if col is None:
            logger.debug("Dropping filter on %s: column not found", expr.field)
            continue
        clauses.append(_build_predicate(col, expr))

    if not clauses:
        return stmt
    return stmt.where(and_(*clauses))


def count_rows(session: Session, stmt: Select) -> int:
    """Count the rows *stmt* would return without its ORDER BY / window."""
    inner = stmt.order_by(None).limit(None).offset(None).subquery()
    return session.execute(select(func.count()).select_from(inner)).scalar_one()


def fetch_rows(session: Session, stmt: Select) -> list:
    """Entities for a single-entity select, row mappings otherwise."""
    if _selects_single_entity(stmt):
        return list(session.scalars(stmt).all())
    return [dict(row) for row in session.execute(stmt).mappings().all()]


# ── Private helpers ─────────────────────────────────────────────────────


def _build_predicate(col: Any, expr: FilterExpression) -> ColumnElement:
    value = expr.value
    op = expr.operator
    if op == FilterOperator.ISNULL:
        return col.is_not(None) if value is False else col.is_(None)
    if op in (FilterOperator.IN, FilterOperator.NOTIN):
        values = [_coerce_for_column(col, v) for v in value]
        return col.in_(values) if op == FilterOperator.IN else col.not_in(values)
    if op == FilterOperator.LIKE:
        return col.like(str(value))
    if op == FilterOperator.ILIKE:
        return col.ilike(str(value))

    value = _coerce_for_column(col, value)
    if op == FilterOperator.NEQ:
        return col != value
    if op == FilterOperator.GT:
        return col > value
    if op == FilterOperator.GTE:
        return col >= value
    if op == FilterOperator.LT:
        return col < value
    if op == FilterOperator.LTE:
        return col <= value
    return col == value


def _coerce_for_column(col: Any, value: Any) -> Any:
    """Convert a textual value to the column's numeric type when possible."""
    if not isinstance(value, str):
        return value
    try:
        python_type = _column_type(col).python_type
    except NotImplementedError:
        return value
    if python_type is bool or python_type not in _NUMERIC_TYPES:
        return value
    try:
        return python_type(value)
    except (ValueError, InvalidOperation):
        return value


def _column_type(col: Any) -> Any:
    return getattr(col, "expression", col).type


def _primary_entity(stmt: Select) -> Any | None:
    descriptions = stmt.column_descriptions
    if not descriptions:
        return None
    return descriptions[0].get("entity")


def _entity_column(entity: Any, name: str) -> Any | None:
    mapper = getattr(inspect(entity, raiseerr=False), "mapper", None)
    if mapper is None:
        return None
    if name not in mapper.columns:
        return None
    return getattr(entity, name)


def _selects_single_entity(stmt: Select) -> bool:
    descriptions = stmt.column_descriptions
    if len(descriptions) != 1:
        return False
    desc = descriptions[0]
    return desc.get("entity") is not None and desc.get("expr") is desc.get("entity")


def _flat_froms(stmt: Select) -> list[FromClause]:
    """FROM elements of *stmt* with JOINs unpacked into their sides."""
    flat: list[FromClause] = []

    def visit(from_: FromClause) -> None:
        if isinstance(from_, Join):
            visit(from_.left)
            visit(from_.right)
        else:
            flat.append(from_)

    for from_ in stmt.get_final_froms():
        visit(from_)
    return flat
