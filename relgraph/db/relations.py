"""Operations on the ``relations`` table.

Edges are owned by their source work and are never edited in place: each sync
replaces the full outgoing set of a source.  The far end of an edge is stored
as an external id and resolved to a local work at read time, so an edge
written before its target was imported picks the work up once it exists.
"""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from time import time
from typing import Iterable, Optional

from relgraph.db.connection import atomic
from relgraph.db.models import Relation, RelationKind, Work
from relgraph.db.works import get_work, list_works_by_external_ids


@dataclass
class NewRelation:
    """One outgoing edge to be written by :func:`replace_relations_for_source`."""

    target_external_id: int
    relation_kind: RelationKind
    target_name: Optional[str] = None
    target_poster_url: Optional[str] = None
    target_year: Optional[int] = None
    target_media_kind: Optional[str] = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_relation(row: sqlite3.Row, other_work: Optional[Work] = None) -> Relation:
    return Relation(
        id=row["id"],
        source_work_id=row["source_work_id"],
        target_external_id=row["target_external_id"],
        relation_kind=RelationKind.parse(row["relation_kind"]),
        target_name=row["target_name"],
        target_poster_url=row["target_poster_url"],
        target_year=row["target_year"],
        target_media_kind=row["target_media_kind"],
        created_at=row["created_at"],
        other_work=other_work,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def replace_relations_for_source(
    conn: sqlite3.Connection,
    source_work_id: str,
    edges: Iterable[NewRelation],
) -> int:
    """Delete every outgoing edge of *source_work_id* and insert *edges*.

    Both statements run in one transaction.  A repeated ``(target, kind)``
    pair within *edges* is written once (first occurrence wins).  Returns the
    number of edges inserted.
    """
    seen: set[tuple[int, RelationKind]] = set()
    rows = []
    now = int(time())
    for edge in edges:
        key = (edge.target_external_id, edge.relation_kind)
        if key in seen:
            continue
        seen.add(key)
        rows.append(
            (
                str(uuid.uuid4()),
                source_work_id,
                edge.target_external_id,
                RelationKind(edge.relation_kind).value,
                edge.target_name,
                edge.target_poster_url,
                edge.target_year,
                edge.target_media_kind,
                now,
            )
        )

    with atomic(conn):
        conn.execute("DELETE FROM relations WHERE source_work_id = ?", (source_work_id,))
        conn.executemany(
            """
            INSERT INTO relations (id, source_work_id, target_external_id, relation_kind,
                                   target_name, target_poster_url, target_year,
                                   target_media_kind, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
    return len(rows)


def list_outgoing(
    conn: sqlite3.Connection,
    source_work_id: str,
    kinds: Optional[Iterable[RelationKind]] = None,
) -> list[Relation]:
    """Return the edges leaving *source_work_id* in insertion order.

    Each edge carries the local target work (``other_work``) when imported.
    """
    sql = "SELECT * FROM relations WHERE source_work_id = ?"
    params: list = [source_work_id]
    if kinds is not None:
        values = [RelationKind(k).value for k in kinds]
        if not values:
            return []
        sql += f" AND relation_kind IN ({', '.join('?' for _ in values)})"
        params.extend(values)
    sql += " ORDER BY rowid"

    rows = conn.execute(sql, params).fetchall()
    targets = {
        w.external_id: w
        for w in list_works_by_external_ids(conn, (r["target_external_id"] for r in rows))
    }
    return [_row_to_relation(r, targets.get(r["target_external_id"])) for r in rows]


def list_incoming(conn: sqlite3.Connection, work_id: str) -> list[Relation]:
    """Return the edges pointing at *work_id*, each with its source work.

    Unknown work ids yield an empty list.
    """
    work = get_work(conn, work_id)
    if work is None:
        return []
    rows = conn.execute(
        "SELECT * FROM relations WHERE target_external_id = ? ORDER BY rowid",
        (work.external_id,),
    ).fetchall()

    sources: dict[str, Optional[Work]] = {}
    for r in rows:
        sid = r["source_work_id"]
        if sid not in sources:
            sources[sid] = get_work(conn, sid)
    return [_row_to_relation(r, sources[r["source_work_id"]]) for r in rows]
