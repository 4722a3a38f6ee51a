"""Operator names accepted in filter expressions."""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class FilterOperator(str, Enum):
    EQ = "eq"          # Equal
    NEQ = "neq"        # Not Equal
    GT = "gt"          # Greater Than
    GTE = "gte"        # Greater Than or Equal
    LT = "lt"          # Less Than
    LTE = "lte"        # Less Than or Equal
    LIKE = "like"      # String LIKE (caller supplies % wildcards)
    ILIKE = "ilike"    # String ILIKE (case-insensitive)
    IN = "in"          # In a list of values
    NOTIN = "notin"    # Not in a list of values
    ISNULL = "isnull"  # Is Null (or IS NOT NULL with a false value)

    @classmethod
    def lookup(cls, name: str) -> FilterOperator:
        """Resolve an operator name, falling back to ``eq`` for unknown names."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            logger.warning("Unknown filter operator %r, treating as 'eq'", name)
            return cls.EQ


# Operators whose value is a ``|``-separated list.
LIST_OPERATORS = frozenset({FilterOperator.IN, FilterOperator.NOTIN})

# Operators that may be written without a value.
NULLARY_OPERATORS = frozenset({FilterOperator.ISNULL})

# List separator inside a single value, since ``,`` separates terms.
LIST_SEPARATOR = "|"
