from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

DEFAULT_DB_TIMEOUT = 30.0

_SQLITE_URL_PREFIXES = ("sqlite:///", "sqlite://")


class DatabaseError(Exception):
    """Custom exception for database connection errors."""


def iso_utcnow() -> str:
    """Return an ISO‑8601 timestamp in UTC with ``Z`` suffix."""

    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def resolve_database_path(connection_string: str) -> Path:
    """Extract the database file path from a connection string.

    Accepts ``sqlite:///path/to.db``, ``Data Source=path/to.db;...`` or a
    bare filesystem path.
    """

    value = (connection_string or "").strip()
    for prefix in _SQLITE_URL_PREFIXES:
        if value.startswith(prefix):
            value = value[len(prefix):]
            break
    else:
        if "=" in value:
            options = {}
            for part in value.split(";"):
                key, _, item = part.partition("=")
                if key.strip():
                    options[key.strip().lower()] = item.strip()
            value = options.get("data source") or options.get("filename") or ""
    if not value:
        raise DatabaseError(f"Connection string does not name a database: {connection_string!r}")
    return Path(value)


def apply_pragmas(
    conn: sqlite3.Connection,
    *,
    enable_wal: bool = True,
    foreign_keys: bool = True,
    busy_timeout_ms: int | None = None,
) -> None:
    """Apply SQLite PRAGMAs required by ToolKeeper."""

    try:
        if enable_wal:
            conn.execute("PRAGMA journal_mode=WAL;")
        if foreign_keys:
            conn.execute("PRAGMA foreign_keys=ON;")
        if busy_timeout_ms is not None:
            conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to apply PRAGMAs: {exc}") from exc


class SessionFactory(Protocol):
    """Produces exclusively owned persistence sessions."""

    def session(self) -> AbstractContextManager[sqlite3.Connection]: ...


class SqliteSessionFactory:
    """Process-wide factory of scoped SQLite sessions.

    The database path is resolved once, when the factory is built. Every call
    to :meth:`session` opens a new connection owned by the caller: the unit of
    work is committed on normal exit, rolled back when the block raises, and
    the connection is closed on every path.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        timeout: float = DEFAULT_DB_TIMEOUT,
        enable_wal: bool = True,
        foreign_keys: bool = True,
    ) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.enable_wal = enable_wal
        self.foreign_keys = foreign_keys

    @classmethod
    def from_connection_string(cls, connection_string: str, **kwargs) -> "SqliteSessionFactory":
        return cls(resolve_database_path(connection_string), **kwargs)

    def connect(self) -> sqlite3.Connection:
        """Open and configure a raw connection."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            # Request handlers and yield dependencies may run on different
            # worker threads; each connection is still used by one request.
            conn = sqlite3.connect(
                self.db_path, timeout=self.timeout, check_same_thread=False
            )
        except sqlite3.Error as exc:
            raise DatabaseError(f"Failed to connect to database: {exc}") from exc
        try:
            apply_pragmas(
                conn,
                enable_wal=self.enable_wal,
                foreign_keys=self.foreign_keys,
                busy_timeout_ms=int(self.timeout * 1000),
            )
        except DatabaseError:
            conn.close()
            raise
        return conn

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection scoped to one unit of work."""
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()


__all__ = [
    "DEFAULT_DB_TIMEOUT",
    "DatabaseError",
    "SessionFactory",
    "SqliteSessionFactory",
    "apply_pragmas",
    "iso_utcnow",
    "resolve_database_path",
]
