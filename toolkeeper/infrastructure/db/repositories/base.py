"""Base repository class with shared database query helpers.

This module provides a base class for all repository implementations,
eliminating duplicate cursor→dict conversion logic.

Repositories never commit: the session that owns the connection commits or
rolls back the whole unit of work.
"""

from __future__ import annotations

import sqlite3
from typing import Any


class DuplicateRecordError(ValueError):
    """Raised when an insert or update violates a uniqueness constraint."""


class BaseRepository:
    """Base class for all repository implementations."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize repository with a database connection.

        Args:
            conn: SQLite connection owned by the current unit of work
        """
        self.conn = conn

    def _fetch_all_as_dicts(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Execute query and return all rows as dictionaries.

        Args:
            query: SQL query string
            params: Query parameters (optional)

        Returns:
            List of dictionaries with column names as keys
        """
        cur = self.conn.execute(query, params or ())
        columns = [c[0] for c in cur.description]
        return [dict(zip(columns, row)) for row in cur.fetchall()]

    def _fetch_one_as_dict(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        """Execute query and return first row as dictionary, or None if no rows."""
        cur = self.conn.execute(query, params or ())
        row = cur.fetchone()
        if not row:
            return None
        columns = [c[0] for c in cur.description]
        return dict(zip(columns, row))

    def _fetch_scalar(self, query: str, params: tuple[Any, ...] | None = None) -> Any:
        """Execute query and return first column of first row."""
        cur = self.conn.execute(query, params or ())
        row = cur.fetchone()
        return row[0] if row else None

    def _execute_insert(self, query: str, params: tuple[Any, ...] | None = None) -> int:
        """Execute INSERT query and return last row ID.

        Raises:
            DuplicateRecordError: If a UNIQUE constraint rejects the row.
        """
        try:
            cur = self.conn.execute(query, params or ())
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc):
                raise DuplicateRecordError(str(exc)) from exc
            raise
        return cur.lastrowid or 0

    def _execute(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> sqlite3.Cursor:
        """Execute query and return cursor for custom processing."""
        return self.conn.execute(query, params or ())
