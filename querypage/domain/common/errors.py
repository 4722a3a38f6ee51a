"""Domain exceptions shared across the pagination layers.

Adapters (routers) translate these into transport-level responses:
``ValidationError`` is the caller's fault (HTTP 400), anything else
derived from ``DomainError`` is a server-side problem.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all querypage domain errors."""


class ValidationError(DomainError):
    """The request parameters cannot be turned into a valid query."""


class FilterSyntaxError(ValidationError):
    """A filter expression does not match the ``op(field, value)`` grammar."""

    def __init__(self, message: str, text: str = "", position: int = 0) -> None:
        self.text = text
        self.position = position
        if text:
            message = f"{message} at position {position}: {text[position:position + 20]!r}"
        super().__init__(message)


class UnknownColumnError(DomainError):
    """A server-configured column name does not exist on the statement."""

    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Unknown column {column!r}")
