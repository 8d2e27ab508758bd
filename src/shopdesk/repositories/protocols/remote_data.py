"""Remote data service protocol (row-oriented CRUD over named tables)."""

from typing import Any, Optional, Protocol

# A filter value is either a plain value (equality), an ``(op, value)`` tuple,
# or a list of such tuples applied to the same column.
# Supported ops: eq, neq, gt, gte, lt, lte.
Filters = dict[str, Any]
Row = dict[str, Any]


class RemoteDataService(Protocol):
    """
    Interface for the hosted relational store.

    Rows are plain dicts keyed by snake_case column names; timestamps travel
    as ISO 8601 strings. Implementations raise RemoteDataError (or one of its
    subclasses) on failure.
    """

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        """Return rows matching all filters."""
        ...

    def get(self, table: str, row_id: str) -> Optional[Row]:
        """Return a single row by primary key, or None."""
        ...

    def count(self, table: str, filters: Optional[Filters] = None) -> int:
        """Count rows matching all filters."""
        ...

    def insert(self, table: str, row: Row) -> Row:
        """Insert a row (id generated when missing) and return it as stored."""
        ...

    def insert_many(self, table: str, rows: list[Row]) -> int:
        """Insert several rows in one transaction; return how many were written."""
        ...

    def update(self, table: str, row_id: str, changes: Row) -> Row:
        """Apply ``changes`` to one row and return the updated row."""
        ...

    def delete(self, table: str, row_id: str) -> None:
        """Physically delete one row."""
        ...

    def delete_all(self, table: str) -> int:
        """Delete every row of ``table``; return how many were removed."""
        ...
