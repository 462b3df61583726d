from __future__ import annotations

import sqlite3
from pathlib import Path

from ..connection import iso_utcnow
from .tables import SCHEMA_MIGRATIONS_SQL

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"


class MigrationError(Exception):
    """Raised when a pending migration cannot be applied."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"Migration {name} failed: {cause}")
        self.name = name


def _sql_literal(value: str | None) -> str:
    if value is None:
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


class SchemaMigrator:
    """Lightweight migration runner backed by ``schema_migrations``.

    Migration files are applied in lexical order and each filename is recorded
    in the ``schema_migrations`` table. A file is applied together with its
    bookkeeping row in one transaction, so a failing migration leaves neither
    partial schema changes nor a record behind. Applied files are skipped,
    which makes :meth:`apply_pending` safe to call on every startup.
    """

    def __init__(self, conn: sqlite3.Connection, migrations_dir: str | Path | None = None) -> None:
        self.conn = conn
        self.migrations_dir = Path(migrations_dir) if migrations_dir else MIGRATIONS_DIR

    def ensure_table(self) -> None:
        self.conn.executescript(SCHEMA_MIGRATIONS_SQL)

    def has_migration(self, name: str) -> bool:
        cur = self.conn.execute(
            "SELECT 1 FROM schema_migrations WHERE name = ?", (name,)
        )
        return cur.fetchone() is not None

    def applied(self) -> list[str]:
        self.ensure_table()
        cur = self.conn.execute("SELECT name FROM schema_migrations ORDER BY id")
        return [row[0] for row in cur.fetchall()]

    def available(self) -> list[Path]:
        if not self.migrations_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.migrations_dir.iterdir()
            if path.is_file() and path.name.lower().endswith(".sql")
        )

    def pending(self) -> list[Path]:
        self.ensure_table()
        return [path for path in self.available() if not self.has_migration(path.name)]

    def apply_sql(self, name: str, sql: str, notes: str | None = None) -> bool:
        """Apply ``sql`` under ``name`` unless it was applied before.

        Returns:
            True if the script ran, False if it was already recorded.

        Raises:
            MigrationError: If the script fails; its changes are rolled back.
        """
        self.ensure_table()
        if self.has_migration(name):
            return False
        script = "\n".join(
            [
                "BEGIN;",
                sql,
                "INSERT INTO schema_migrations (name, applied_at, notes) VALUES "
                f"({_sql_literal(name)}, {_sql_literal(iso_utcnow())}, {_sql_literal(notes)});",
                "COMMIT;",
            ]
        )
        try:
            self.conn.executescript(script)
        except sqlite3.Error as exc:
            if self.conn.in_transaction:
                self.conn.rollback()
            raise MigrationError(name, exc) from exc
        return True

    def apply_pending(self) -> list[str]:
        """Apply every pending migration file and return their names."""
        applied: list[str] = []
        for path in self.pending():
            with open(path, "r", encoding="utf-8") as f:
                sql = f.read()
            if self.apply_sql(path.name, sql, notes=f"applied from {path.name}"):
                applied.append(path.name)
        return applied
