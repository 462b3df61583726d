from .migrations import MIGRATIONS_DIR, MigrationError, SchemaMigrator

__all__ = [
    "MIGRATIONS_DIR",
    "MigrationError",
    "SchemaMigrator",
]
