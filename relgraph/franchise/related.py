"""Symmetric view of the works related to a pivot work."""

from __future__ import annotations

import sqlite3

from relgraph.db import relations, works
from relgraph.franchise.kinds import invert
from relgraph.franchise.models import WatchItem


def collect_related(conn: sqlite3.Connection, work_id: str) -> list[WatchItem]:
    """Return the pivot work followed by every locally imported neighbour.

    Outgoing edges contribute their target with the edge's kind; incoming
    edges contribute their source with the inverted kind.  A work reached
    more than once keeps its first occurrence.  Unknown ids yield ``[]``.
    """
    pivot = works.get_work(conn, work_id)
    if pivot is None:
        return []

    items = [WatchItem(work=pivot, is_pivot=True)]
    for edge in relations.list_outgoing(conn, work_id):
        if edge.other_work is not None:
            items.append(WatchItem(work=edge.other_work, relation_kind=edge.relation_kind))
    for edge in relations.list_incoming(conn, work_id):
        if edge.other_work is not None:
            items.append(
                WatchItem(work=edge.other_work, relation_kind=invert(edge.relation_kind))
            )

    seen: set[str] = set()
    unique = []
    for item in items:
        if item.work.id in seen:
            continue
        seen.add(item.work.id)
        unique.append(item)
    return unique
