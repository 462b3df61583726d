from .connection import (DEFAULT_DB_TIMEOUT, DatabaseError, SessionFactory,
                         SqliteSessionFactory, apply_pragmas, iso_utcnow,
                         resolve_database_path)
from .schema import MIGRATIONS_DIR, MigrationError, SchemaMigrator

__all__ = [
    "DEFAULT_DB_TIMEOUT",
    "DatabaseError",
    "MIGRATIONS_DIR",
    "MigrationError",
    "SchemaMigrator",
    "SessionFactory",
    "SqliteSessionFactory",
    "apply_pragmas",
    "iso_utcnow",
    "resolve_database_path",
]
