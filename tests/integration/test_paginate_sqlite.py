"""SQL-level integration tests for the pagination query builder.

Runs paginate() against an in-memory SQLite database seeded with six
cats (see tests/conftest.py) to verify that window, ORDER BY, ILIKE
search, filter expressions and config ``where`` produce the right rows.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import aliased

from querypage.domain.common.errors import FilterSyntaxError, UnknownColumnError
from querypage.domain.common.query import PaginateConfig, PaginateQuery
from querypage.domain.filtering import FilterOperator
from querypage.infra.query.paginate_query import paginate, resolve_column
from querypage.models.cat import Cat, CatToy
from tests.helpers.query_counter import count_queries

PATH = "http://api.test/cats"
BY_ID = PaginateConfig(default_sort_by=[("id", "ASC")])


def _query(**kwargs) -> PaginateQuery:
    kwargs.setdefault("path", PATH)
    if "sort_by" in kwargs:
        kwargs["sort_by"] = tuple(kwargs["sort_by"])
    return PaginateQuery(**kwargs)


def _names(result) -> list[str]:
    return [cat.name for cat in result.data]


# ---------------------------------------------------------------------------
# Window
# ---------------------------------------------------------------------------


class TestWindow:
    def test_default_window_returns_everything(self, session, cats):
        result = paginate(_query(), Cat, BY_ID, session)
        assert len(result.data) == 6
        assert result.meta.items_per_page == 20
        assert result.meta.total_items == 6
        assert result.meta.current_page == 1
        assert result.meta.total_pages == 1

    def test_second_page(self, session, cats):
        result = paginate(_query(page=2, limit=2), Cat, BY_ID, session)
        assert [cat.id for cat in result.data] == [3, 4]
        assert result.meta.total_pages == 3
        assert result.links.first == f"{PATH}?page=1&limit=2&sortBy=id%3AASC"
        assert result.links.previous == f"{PATH}?page=1&limit=2&sortBy=id%3AASC"
        assert result.links.current == f"{PATH}?page=2&limit=2&sortBy=id%3AASC"
        assert result.links.next == f"{PATH}?page=3&limit=2&sortBy=id%3AASC"
        assert result.links.last == f"{PATH}?page=3&limit=2&sortBy=id%3AASC"

    def test_last_partial_page(self, session, cats):
        result = paginate(_query(page=2, limit=4), Cat, BY_ID, session)
        assert [cat.id for cat in result.data] == [5, 6]
        assert result.links.next is None
        assert result.links.last is None

    def test_page_past_the_end_is_empty(self, session, cats):
        result = paginate(_query(page=5, limit=4), Cat, BY_ID, session)
        assert result.data == []
        assert result.meta.total_items == 6
        assert result.meta.current_page == 5

    def test_page_zero_is_first_page(self, session, cats):
        result = paginate(_query(page=0, limit=2), Cat, BY_ID, session)
        assert result.meta.current_page == 1
        assert [cat.id for cat in result.data] == [1, 2]

    def test_limit_capped_by_config_max_limit(self, session, cats):
        config = PaginateConfig(max_limit=4, default_sort_by=[("id", "ASC")])
        result = paginate(_query(limit=500), Cat, config, session)
        assert result.meta.items_per_page == 4
        assert len(result.data) == 4

    def test_config_default_limit(self, session, cats):
        config = PaginateConfig(default_limit=5)
        result = paginate(_query(), Cat, config, session)
        assert result.meta.items_per_page == 5
        assert result.meta.total_pages == 2

    def test_issues_exactly_count_and_fetch(self, engine, session, cats):
        with count_queries(engine) as log:
            paginate(_query(limit=2, filter="gt(age, 1)"), Cat, BY_ID, session)
        assert len(log) == 2


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------


class TestSort:
    def test_sort_desc(self, session, cats):
        result = paginate(_query(sort_by=[("name", "DESC")]), Cat, PaginateConfig(), session)
        assert _names(result) == ["Tom", "Shadow", "Milo", "Leche", "George", "Garfield"]
        assert result.meta.sort_by == (("name", "DESC"),)

    def test_multi_column_sort(self, session, cats):
        result = paginate(
            _query(sort_by=[("color", "ASC"), ("name", "DESC")]), Cat, PaginateConfig(), session
        )
        assert _names(result) == ["Shadow", "Milo", "Garfield", "Tom", "Leche", "George"]

    def test_invalid_direction_is_dropped_and_default_used(self, session, cats):
        config = PaginateConfig(default_sort_by=[("age", "DESC")])
        result = paginate(_query(sort_by=[("name", "UP")]), Cat, config, session)
        assert result.meta.sort_by == (("age", "DESC"),)
        assert _names(result)[:2] == ["Milo", "Garfield"]

    def test_non_sortable_column_is_dropped(self, session, cats):
        config = PaginateConfig(sortable_columns=["id", "name"])
        result = paginate(_query(sort_by=[("color", "ASC"), ("name", "ASC")]), Cat, config, session)
        assert result.meta.sort_by == (("name", "ASC"),)
        assert _names(result)[0] == "Garfield"

    def test_unknown_column_is_dropped(self, session, cats):
        result = paginate(_query(sort_by=[("whiskers", "ASC")]), Cat, BY_ID, session)
        assert result.meta.sort_by == (("id", "ASC"),)

    def test_sort_appears_in_links(self, session, cats):
        result = paginate(_query(limit=2, sort_by=[("name", "ASC")]), Cat, PaginateConfig(), session)
        assert "sortBy=name%3AASC" in result.links.next


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    def test_column_search_is_case_insensitive(self, session, cats):
        result = paginate(_query(search="name:MI"), Cat, BY_ID, session)
        assert _names(result) == ["Milo"]
        assert result.meta.search == "name:MI"

    def test_multiple_terms_are_ored(self, session, cats):
        result = paginate(_query(search="name:tom,color:black"), Cat, BY_ID, session)
        assert _names(result) == ["Shadow", "Tom"]

    def test_numeric_column_is_cast_to_text(self, session, cats):
        result = paginate(_query(search="age:5"), Cat, BY_ID, session)
        assert _names(result) == ["Garfield"]

    def test_terms_without_value_are_skipped(self, session, cats):
        result = paginate(_query(search="name:,color"), Cat, BY_ID, session)
        assert result.meta.total_items == 6

    def test_bare_term_searches_every_searchable_column(self, session, cats):
        config = PaginateConfig(searchable_columns=["name", "color"], default_sort_by=[("id", "ASC")])
        result = paginate(_query(search="white"), Cat, config, session)
        assert _names(result) == ["George", "Leche"]

    def test_non_searchable_column_is_ignored(self, session, cats):
        config = PaginateConfig(searchable_columns=["name"])
        result = paginate(_query(search="color:white"), Cat, config, session)
        assert result.meta.total_items == 6

    def test_search_is_anded_with_filters(self, session, cats):
        result = paginate(
            _query(search="color:white", filter="gt(age, 2)"), Cat, BY_ID, session
        )
        assert _names(result) == ["George"]


# ---------------------------------------------------------------------------
# Filter expressions
# ---------------------------------------------------------------------------


class TestFilters:
    @pytest.mark.parametrize("text, expected", [
        ("eq(color, white)", ["George", "Leche"]),
        ("neq(color, white)", ["Milo", "Garfield", "Shadow", "Tom"]),
        ("gt(age, 4)", ["Milo", "Garfield"]),
        ("gte(age, 4)", ["Milo", "Garfield", "Shadow"]),
        ("lt(age, 3)", ["Leche"]),
        ("lte(age, 3)", ["George", "Leche"]),
        ("like(name, M%)", ["Milo"]),
        ("ilike(name, m%)", ["Milo"]),
        ("in(age, 1|3)", ["George", "Leche"]),
        ("notin(color, white|grey)", ["Milo", "Garfield", "Shadow"]),
        ("isnull(age)", ["Tom"]),
        ("isnull(age, false)", ["Milo", "Garfield", "Shadow", "George", "Leche"]),
        ("eq(is_indoor, false)", ["Garfield", "Leche"]),
        ("eq(color, white), gt(age, 2)", ["George"]),
    ])
    def test_operator(self, session, cats, text, expected):
        result = paginate(_query(filter=text), Cat, BY_ID, session)
        assert _names(result) == expected
        assert result.meta.filter == text

    def test_numeric_comparison_is_not_lexicographic(self, session, cats):
        # "10" < "4" as text, but 10 > 4 as integers
        result = paginate(_query(filter="lt(age, 10)"), Cat, BY_ID, session)
        assert result.meta.total_items == 5

    def test_unknown_operator_behaves_as_eq(self, session, cats):
        result = paginate(_query(filter="is(color, black)"), Cat, BY_ID, session)
        assert _names(result) == ["Shadow"]

    def test_malformed_filter_raises(self, session, cats):
        with pytest.raises(FilterSyntaxError):
            paginate(_query(filter="color = white"), Cat, BY_ID, session)

    def test_filterable_columns_restrict_fields_and_operators(self, session, cats):
        config = PaginateConfig(
            filterable_columns={"color": [FilterOperator.EQ]},
            default_sort_by=[("id", "ASC")],
        )
        result = paginate(
            _query(filter="eq(color, white), gt(age, 2), neq(color, brown)"), Cat, config, session
        )
        assert _names(result) == ["George", "Leche"]

    def test_unknown_filter_column_is_dropped(self, session, cats):
        result = paginate(_query(filter="eq(whiskers, 12)"), Cat, BY_ID, session)
        assert result.meta.total_items == 6

    def test_no_match_has_no_pages(self, session, cats):
        result = paginate(_query(filter="eq(color, purple)"), Cat, BY_ID, session)
        assert result.data == []
        assert result.meta.total_pages == 0
        assert result.links.next is None
        assert result.links.last is None


# ---------------------------------------------------------------------------
# Parameter binding
# ---------------------------------------------------------------------------


class TestParameterBinding:
    def test_quote_in_filter_value_matches_literally(self, session, cats):
        result = paginate(_query(filter="eq(name, x' OR '1'='1)"), Cat, BY_ID, session)
        assert result.data == []
        assert result.meta.total_items == 0

    def test_quote_in_search_term_matches_literally(self, session, cats):
        result = paginate(_query(search="name:%' OR 1=1 --"), Cat, BY_ID, session)
        assert result.data == []

    def test_filter_and_search_values_are_bound(self, engine, session, cats):
        with count_queries(engine) as log:
            paginate(
                _query(filter="eq(color, white), like(name, G%)", search="color:hit"),
                Cat,
                BY_ID,
                session,
            )
        assert len(log) == 2
        for statement in log.statements:
            assert "?" in statement
            assert "white" not in statement
            assert "G%" not in statement
            assert "hit" not in statement
        values = log.bound_values()
        assert "white" in values
        assert "G%" in values
        assert "%hit%" in values


# ---------------------------------------------------------------------------
# Config where
# ---------------------------------------------------------------------------


class TestWhere:
    def test_mapping_where(self, session, cats):
        config = PaginateConfig(where={"color": "white"}, default_sort_by=[("id", "ASC")])
        result = paginate(_query(), Cat, config, session)
        assert _names(result) == ["George", "Leche"]

    def test_expression_where(self, session, cats):
        config = PaginateConfig(where=[Cat.age > 4, Cat.is_indoor.is_(True)])
        result = paginate(_query(), Cat, config, session)
        assert _names(result) == ["Milo"]

    def test_where_is_anded_with_search(self, session, cats):
        config = PaginateConfig(where={"is_indoor": True}, default_sort_by=[("id", "ASC")])
        result = paginate(_query(search="color:white"), Cat, config, session)
        assert _names(result) == ["George"]

    def test_unknown_where_column_raises(self, session, cats):
        config = PaginateConfig(where={"whiskers": 12})
        with pytest.raises(UnknownColumnError):
            paginate(_query(), Cat, config, session)


# ---------------------------------------------------------------------------
# Caller-built statements
# ---------------------------------------------------------------------------


class TestSelectSource:
    @pytest.fixture
    def toys(self):
        return aliased(CatToy, name="toys")

    def test_sort_on_joined_alias_column(self, session, cats, toys):
        stmt = select(Cat).join(Cat.toys.of_type(toys))
        result = paginate(_query(sort_by=[("toys.name", "ASC")]), stmt, PaginateConfig(), session)
        assert _names(result) == ["Shadow", "Garfield", "Milo"]

    def test_filter_on_joined_alias_column(self, session, cats, toys):
        stmt = select(Cat).join(Cat.toys.of_type(toys))
        result = paginate(_query(filter="eq(toys.name, Mouse)"), stmt, PaginateConfig(), session)
        assert _names(result) == ["Milo"]

    def test_search_on_joined_alias_column(self, session, cats, toys):
        stmt = select(Cat).join(Cat.toys.of_type(toys))
        result = paginate(_query(search="toys.name:lasa"), stmt, PaginateConfig(), session)
        assert _names(result) == ["Garfield"]

    def test_column_select_returns_mappings(self, session, cats):
        stmt = select(Cat.name, Cat.age)
        result = paginate(_query(limit=2, sort_by=[("age", "DESC")]), stmt, PaginateConfig(), session)
        assert result.data == [{"name": "Milo", "age": 6}, {"name": "Garfield", "age": 5}]

    def test_distinct_select_counts_distinct_rows(self, session, cats):
        stmt = select(Cat.color).distinct()
        result = paginate(_query(limit=2, sort_by=[("color", "ASC")]), stmt, PaginateConfig(), session)
        assert result.meta.total_items == 5
        assert result.meta.total_pages == 3
        assert result.data == [{"color": "black"}, {"color": "brown"}]


class TestResolveColumn:
    def test_plain_name_resolves_on_entity(self):
        assert resolve_column(select(Cat), "name") is Cat.name

    def test_quoted_name(self):
        assert resolve_column(select(Cat), '"name"') is Cat.name

    def test_table_qualified_name(self):
        col = resolve_column(select(Cat), "cats.color")
        assert col is not None
        assert col.name == "color"

    def test_unknown_names(self):
        stmt = select(Cat)
        assert resolve_column(stmt, "whiskers") is None
        assert resolve_column(stmt, "dogs.name") is None
        assert resolve_column(stmt, "cats.") is None
