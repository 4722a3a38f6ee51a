"""Parser for the compact filter grammar.

A filter text is a comma-joined list of terms::

    eq(color, white), like(name, Mi%), in(age, 2|3|4), isnull(deleted_at)

Each term becomes a :class:`FilterExpression`.  The parser only deals
with text; resolving fields to columns and building SQL predicates is
the job of ``querypage.infra.query.paginate_query``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from querypage.domain.common.errors import FilterSyntaxError
from querypage.domain.filtering.operators import (
    LIST_OPERATORS,
    LIST_SEPARATOR,
    NULLARY_OPERATORS,
    FilterOperator,
)

FilterValue = Union[str, bool, tuple[str, ...], None]

_TERM = re.compile(
    r"""
    \s*
    (?P<op>[A-Za-z_]\w*)            # operator name
    \s*\(\s*
    (?P<field>[\w."]+)              # field, optionally alias-qualified / quoted
    \s*
    (?:,(?P<value>[^(),]*))?        # value: anything but parens and commas
    \)
    \s*
    """,
    re.VERBOSE,
)
_SEPARATOR = re.compile(r"\s*,\s*")


@dataclass(frozen=True)
class FilterExpression:
    """One ``operator(field, value)`` term."""

    operator: FilterOperator
    field: str
    value: FilterValue = None


def try_parse_boolean(text: str) -> bool | None:
    """Return True/False for ``"true"``/``"false"`` (any case), else None."""
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def parse_filter(text: str | None) -> list[FilterExpression]:
    """Parse a filter text into expressions, in the order written.

    Raises:
        FilterSyntaxError: if any part of *text* is not a well-formed term.
    """
    if not text or not text.strip():
        return []

    expressions: list[FilterExpression] = []
    pos = 0
    end = len(text)
    while pos < end:
        sep = _SEPARATOR.match(text, pos)
        if sep and sep.group():
            pos = sep.end()
            continue
        if text[pos:].strip() == "":
            break
        term = _TERM.match(text, pos)
        if term is None:
            raise FilterSyntaxError("Malformed filter expression", text, pos)
        expressions.append(_build_expression(term, text))
        pos = term.end()
        if pos < end and text[pos] != ",":
            raise FilterSyntaxError("Expected ',' between filter terms", text, pos)
    return expressions


def _build_expression(term: re.Match, text: str) -> FilterExpression:
    operator = FilterOperator.lookup(term.group("op"))
    field_name = _clean_field(term.group("field"))
    if not field_name:
        raise FilterSyntaxError("Missing filter field", text, term.start("field"))

    raw = term.group("value")
    raw = raw.strip() if raw is not None else ""
    if not raw:
        if operator in NULLARY_OPERATORS:
            return FilterExpression(operator, field_name, True)
        raise FilterSyntaxError(
            f"Filter operator '{operator.value}' requires a value", text, term.start()
        )

    value = _coerce_value(operator, raw)
    if operator in NULLARY_OPERATORS and not isinstance(value, bool):
        raise FilterSyntaxError(
            f"Filter operator '{operator.value}' only accepts true or false",
            text,
            term.start("value"),
        )
    return FilterExpression(operator, field_name, value)


def _coerce_value(operator: FilterOperator, raw: str) -> FilterValue:
    if operator in LIST_OPERATORS:
        return tuple(v.strip() for v in raw.split(LIST_SEPARATOR) if v.strip())
    boolean = try_parse_boolean(raw)
    if boolean is not None:
        return boolean
    return raw


def _clean_field(field_name: str) -> str:
    return ".".join(part.replace('"', "").strip() for part in field_name.split("."))
