"""Operations on the ``franchises`` table."""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Optional

from relgraph.db.connection import atomic
from relgraph.db.models import Franchise


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_franchise(row: sqlite3.Row) -> Franchise:
    return Franchise(
        id=row["id"],
        name=row["name"],
        root_external_id=row["root_external_id"],
        graph_snapshot=row["graph_snapshot"],
        graph_synced_at=row["graph_synced_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_franchise(conn: sqlite3.Connection, franchise_id: str) -> Optional[Franchise]:
    """Fetch a franchise by id.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM franchises WHERE id = ?", (franchise_id,)
    ).fetchone()
    return _row_to_franchise(row) if row else None


def find_franchise_by_root_id(
    conn: sqlite3.Connection, root_external_id: int
) -> Optional[Franchise]:
    """Fetch the franchise keyed by *root_external_id*, if any."""
    row = conn.execute(
        "SELECT * FROM franchises WHERE root_external_id = ?", (root_external_id,)
    ).fetchone()
    return _row_to_franchise(row) if row else None


def upsert_franchise_by_root_id(
    conn: sqlite3.Connection,
    root_external_id: int,
    name: str,
    graph_snapshot: Optional[str],
    synced_at: Optional[int] = None,
) -> Franchise:
    """Create the franchise for *root_external_id* or overwrite its data.

    ``name``, ``graph_snapshot`` and ``graph_synced_at`` are replaced
    unconditionally on an existing row; the id and ``created_at`` are kept.
    """
    now = int(time())
    synced = now if synced_at is None else synced_at
    with atomic(conn):
        conn.execute(
            """
            INSERT INTO franchises (id, name, root_external_id, graph_snapshot,
                                    graph_synced_at, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (root_external_id) DO UPDATE SET
                name            = excluded.name,
                graph_snapshot  = excluded.graph_snapshot,
                graph_synced_at = excluded.graph_synced_at,
                updated_at      = excluded.updated_at
            """,
            (str(uuid.uuid4()), name, root_external_id, graph_snapshot, synced, now, now),
        )
    return find_franchise_by_root_id(conn, root_external_id)  # type: ignore[return-value]


def update_franchise_graph(
    conn: sqlite3.Connection,
    franchise_id: str,
    graph_snapshot: str,
    name: Optional[str] = None,
    synced_at: Optional[int] = None,
) -> Franchise:
    """Replace the stored snapshot (and optionally the name) of a franchise.

    Raises:
        ValueError: If ``franchise_id`` does not exist.
    """
    now = int(time())
    updates: dict[str, object] = {
        "graph_snapshot": graph_snapshot,
        "graph_synced_at": now if synced_at is None else synced_at,
        "updated_at": now,
    }
    if name:
        updates["name"] = name
    set_clause = ", ".join(f"{col} = ?" for col in updates)

    with atomic(conn):
        cur = conn.execute(
            f"UPDATE franchises SET {set_clause} WHERE id = ?",  # noqa: S608
            [*updates.values(), franchise_id],
        )
    if cur.rowcount == 0:
        raise ValueError(f"Franchise not found: {franchise_id!r}")
    return get_franchise(conn, franchise_id)  # type: ignore[return-value]


def list_stale_franchises(
    conn: sqlite3.Connection, synced_before: int, limit: int
) -> list[Franchise]:
    """Franchises with a root key whose graph was never synced or synced
    before the *synced_before* timestamp, oldest first.

    Raises:
        ValueError: If *limit* is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    rows = conn.execute(
        """
        SELECT * FROM franchises
        WHERE  root_external_id IS NOT NULL
          AND  (graph_synced_at IS NULL OR graph_synced_at < ?)
        ORDER  BY graph_synced_at IS NOT NULL, graph_synced_at, rowid
        LIMIT  ?
        """,
        (synced_before, limit),
    ).fetchall()
    return [_row_to_franchise(r) for r in rows]


def list_franchises(conn: sqlite3.Connection) -> list[Franchise]:
    """Return all franchises ordered by name."""
    rows = conn.execute("SELECT * FROM franchises ORDER BY name, rowid").fetchall()
    return [_row_to_franchise(r) for r in rows]
