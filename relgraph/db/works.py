"""Operations on the ``works`` and ``episodes`` tables."""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Iterable, Optional

from relgraph.db.connection import atomic
from relgraph.db.models import WatchStatus, Work


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_work(row: sqlite3.Row) -> Work:
    return Work(
        id=row["id"],
        external_id=row["external_id"],
        name=row["name"],
        year=row["year"],
        watch_status=WatchStatus(row["watch_status"]),
        franchise_id=row["franchise_id"],
        poster_path=row["poster_path"],
        episode_count=row["episode_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_work(
    conn: sqlite3.Connection,
    external_id: int,
    name: str,
    year: Optional[int] = None,
    watch_status: WatchStatus = WatchStatus.NOT_STARTED,
    poster_path: Optional[str] = None,
    episode_count: int = 0,
    work_id: Optional[str] = None,
) -> Work:
    """Insert a new work and return it.

    The import pipeline owns work creation; this helper exists so it (and
    tests) can write rows in the shape this package reads.
    """
    wid = work_id or str(uuid.uuid4())
    now = int(time())
    with atomic(conn):
        conn.execute(
            """
            INSERT INTO works (id, external_id, name, year, watch_status,
                               poster_path, episode_count, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (wid, external_id, name, year, WatchStatus(watch_status).value,
             poster_path, episode_count, now, now),
        )
    return get_work(conn, wid)  # type: ignore[return-value]


def get_work(conn: sqlite3.Connection, work_id: str) -> Optional[Work]:
    """Fetch a single work by id.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM works WHERE id = ?", (work_id,)).fetchone()
    return _row_to_work(row) if row else None


def find_work_by_external_id(conn: sqlite3.Connection, external_id: int) -> Optional[Work]:
    """Fetch the local work imported from *external_id*, if any."""
    row = conn.execute(
        "SELECT * FROM works WHERE external_id = ?", (external_id,)
    ).fetchone()
    return _row_to_work(row) if row else None


def list_works_by_external_ids(
    conn: sqlite3.Connection, external_ids: Iterable[int]
) -> list[Work]:
    """Return every local work whose external id is in *external_ids*."""
    ids = sorted(set(external_ids))
    if not ids:
        return []
    placeholders = ", ".join("?" for _ in ids)
    rows = conn.execute(
        f"SELECT * FROM works WHERE external_id IN ({placeholders}) "  # noqa: S608
        "ORDER BY external_id",
        ids,
    ).fetchall()
    return [_row_to_work(r) for r in rows]


def list_franchise_works(conn: sqlite3.Connection, franchise_id: str) -> list[Work]:
    """Return the works currently linked to *franchise_id*."""
    rows = conn.execute(
        "SELECT * FROM works WHERE franchise_id = ? ORDER BY external_id",
        (franchise_id,),
    ).fetchall()
    return [_row_to_work(r) for r in rows]


def set_watch_status(
    conn: sqlite3.Connection,
    work_id: str,
    status: WatchStatus,
    now: Optional[int] = None,
) -> Work:
    """Change a work's watch status and bump ``updated_at``.

    Raises:
        ValueError: If ``work_id`` does not exist.
    """
    ts = int(time()) if now is None else now
    with atomic(conn):
        cur = conn.execute(
            "UPDATE works SET watch_status = ?, updated_at = ? WHERE id = ?",
            (WatchStatus(status).value, ts, work_id),
        )
    if cur.rowcount == 0:
        raise ValueError(f"Work not found: {work_id!r}")
    return get_work(conn, work_id)  # type: ignore[return-value]


def bulk_set_franchise(
    conn: sqlite3.Connection, work_ids: Iterable[str], franchise_id: str
) -> int:
    """Point every work in *work_ids* at *franchise_id* in one statement.

    Returns the number of rows matched.
    """
    ids = list(dict.fromkeys(work_ids))
    if not ids:
        return 0
    placeholders = ", ".join("?" for _ in ids)
    with atomic(conn):
        cur = conn.execute(
            f"UPDATE works SET franchise_id = ? WHERE id IN ({placeholders})",  # noqa: S608
            [franchise_id, *ids],
        )
    return cur.rowcount


def list_recently_completed_works(conn: sqlite3.Connection, limit: int) -> list[Work]:
    """Return up to *limit* COMPLETED works, most recently updated first.

    Raises:
        ValueError: If *limit* is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    rows = conn.execute(
        """
        SELECT * FROM works
        WHERE  watch_status = ?
        ORDER  BY updated_at DESC, rowid DESC
        LIMIT  ?
        """,
        (WatchStatus.COMPLETED.value, limit),
    ).fetchall()
    return [_row_to_work(r) for r in rows]


# ---------------------------------------------------------------------------
# Episodes
# ---------------------------------------------------------------------------

def add_episode(conn: sqlite3.Connection, work_id: str, number: int) -> str:
    """Record a loaded episode for *work_id* and return its id."""
    eid = str(uuid.uuid4())
    with atomic(conn):
        conn.execute(
            "INSERT INTO episodes (id, work_id, number) VALUES (?, ?, ?)",
            (eid, work_id, number),
        )
    return eid


def first_episode_id(conn: sqlite3.Connection, work_id: str) -> Optional[str]:
    """Id of the lowest-numbered loaded episode, or ``None``."""
    row = conn.execute(
        "SELECT id FROM episodes WHERE work_id = ? ORDER BY number, rowid LIMIT 1",
        (work_id,),
    ).fetchone()
    return row["id"] if row else None


def count_episodes(conn: sqlite3.Connection, work_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM episodes WHERE work_id = ?", (work_id,)
    ).fetchone()
    return row[0]
