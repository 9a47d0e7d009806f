"""Database initialisation and migration helpers.

``init_db(conn)`` is idempotent and safe to call on an existing database.
``migrate(conn)`` runs incremental schema changes tracked in a version table.
"""

from __future__ import annotations

import sqlite3

from relgraph.config import settings

# Each migration is ``(version, sql)``; append new ones in version order.
MIGRATIONS: list[tuple[int, str]] = []


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_schema() -> str:
    return settings.schema_path.read_text(encoding="utf-8")


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    """Create the internal schema-version tracking table if absent."""
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version    INTEGER PRIMARY KEY,
                applied_at INTEGER DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
            )
            """
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes, then apply pending migrations.

    Every DDL statement uses ``IF NOT EXISTS`` so calling this multiple times
    on the same database is safe.

    Args:
        conn: An open, configured SQLite connection.
    """
    # executescript() issues an implicit COMMIT before running, which is fine
    # for a DDL-only script.
    conn.executescript(_read_schema())
    _ensure_version_table(conn)
    migrate(conn)


def current_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied migration version (0 if none applied)."""
    row = conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_version"
    ).fetchone()
    return row[0] if row else 0


def migrate(conn: sqlite3.Connection, migrations: list[tuple[int, str]] | None = None) -> int:
    """Run any pending incremental migrations.

    Migrations are applied in version order and recorded in
    ``schema_version``.  Returns the number of migrations applied.
    """
    pending = MIGRATIONS if migrations is None else migrations
    applied = current_version(conn)
    count = 0
    for version, sql in sorted(pending):
        if version > applied:
            with conn:
                conn.execute(sql)
                conn.execute(
                    "INSERT INTO schema_version(version) VALUES (?)", (version,)
                )
            count += 1
    return count
