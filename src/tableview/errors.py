"""Structured errors raised by the recycling table view."""

from __future__ import annotations

from typing import Any

__all__ = [
    "TableViewError",
    "RowIndexError",
    "CellReuseError",
    "DataSourceError",
]


class TableViewError(Exception):
    """Base class for table view contract violations."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class RowIndexError(TableViewError, IndexError):
    """Raised when a row index lies outside the bounds reported by the data source."""


class CellReuseError(TableViewError):
    """Raised when a cell is released twice or handed to a foreign pool."""


class DataSourceError(TableViewError):
    """Raised when a data provider reports an impossible value (e.g. negative count)."""
