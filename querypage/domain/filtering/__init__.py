"""Textual filter grammar: ``op(field, value), op(field, value)``."""

from .operators import FilterOperator
from .parser import FilterExpression, parse_filter, try_parse_boolean

__all__ = ["FilterOperator", "FilterExpression", "parse_filter", "try_parse_boolean"]
