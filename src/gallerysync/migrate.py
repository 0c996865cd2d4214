# src/gallerysync/migrate.py
"""Catalog schema migrations: gallerysync/migrations/*.sql, applied once each in name order."""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from gallerysync.errors import CatalogError

logger = logging.getLogger("gallerysync.migrate")

MIGRATIONS_PATH = Path(__file__).parent / "migrations"


def ensure_migration_table(conn):
    conn.execute("""
    CREATE TABLE IF NOT EXISTS schema_migrations (
        filename TEXT PRIMARY KEY,
        applied_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """)
    conn.commit()


def pending_migrations(conn, migrations_path: Path = MIGRATIONS_PATH):
    ensure_migration_table(conn)
    applied = {row[0] for row in conn.execute("SELECT filename FROM schema_migrations")}
    return [f for f in sorted(migrations_path.glob("*.sql")) if f.name not in applied]


def apply_migrations(conn: sqlite3.Connection, migrations_path: Path = MIGRATIONS_PATH) -> int:
    """Bring the catalog schema up to date. Returns the number of migrations applied."""
    pending = pending_migrations(conn, migrations_path)

    for sql_file in pending:
        logger.info(f"🔧 Applying catalog migration: {sql_file.name}")
        try:
            conn.executescript(sql_file.read_text())
        except sqlite3.DatabaseError as e:
            conn.rollback()
            raise CatalogError(f"Catalog migration {sql_file.name} failed: {e}") from e
        conn.execute(
            "INSERT INTO schema_migrations (filename, applied_at) VALUES (?, ?)",
            (sql_file.name, datetime.now(timezone.utc).isoformat()),
        )
        conn.commit()

    return len(pending)
