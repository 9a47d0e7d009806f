"""Collapse a provider graph into a stably keyed Franchise.

A franchise is keyed by the minimum external id among the nodes of its graph.
Membership can grow as the provider learns about new titles, but the minimum
id of a cluster that has already been seen does not change, so every member
work resolves to the same row no matter which one triggered the sync.

Sync is last-write-wins: the stored name and snapshot are overwritten, never
merged, and membership is recomputed from the node list each time.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from time import time
from typing import Optional

from relgraph.db import atomic, franchises, works
from relgraph.db.models import Franchise, RawGraph
from relgraph.franchise.models import SyncResult

logger = logging.getLogger(__name__)

UNKNOWN_FRANCHISE_NAME = "Unknown franchise"


# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------

def root_external_id(graph: RawGraph) -> Optional[int]:
    """Canonical key of *graph*: its minimum node id (``None`` when empty)."""
    ids = graph.node_ids
    return min(ids) if ids else None


def franchise_name(graph: RawGraph) -> str:
    """Display name of the franchise: the name of its root node."""
    root = root_external_id(graph)
    for node in graph.nodes:
        if node.external_id == root and node.name:
            return node.name
    return UNKNOWN_FRANCHISE_NAME


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sync_franchise_from_graph(
    conn: sqlite3.Connection,
    graph: RawGraph,
    root_external_id: int,
    franchise_name: str,
    now: Optional[int] = None,
) -> SyncResult:
    """Upsert the franchise for *graph* and link every local member work.

    Args:
        conn: Open DB connection.
        graph: Provider graph for some member work.
        root_external_id: Minimum node id of *graph*, as computed by the
            caller with :func:`root_external_id`.
        franchise_name: Display name to store.
        now: Sync timestamp override (unix seconds).

    Returns:
        The stored franchise and the number of works linked to it.  An empty
        graph, or a graph with no local works whose franchise does not exist
        yet, is a no-op and returns ``SyncResult(None, 0)``.

    Raises:
        ValueError: If *root_external_id* is not the minimum node id.
        sqlite3.Error: On storage failure; nothing is committed.
    """
    node_ids = graph.node_ids
    if not node_ids:
        logger.info("Empty graph for root %s, nothing to sync", root_external_id)
        return SyncResult(franchise=None, updated_count=0)

    expected = min(node_ids)
    if root_external_id != expected:
        raise ValueError(
            f"root_external_id {root_external_id} is not the minimum node id ({expected})"
        )

    members = works.list_works_by_external_ids(conn, node_ids)
    if not members and franchises.find_franchise_by_root_id(conn, root_external_id) is None:
        logger.info("No local works in graph %s, franchise not created", root_external_id)
        return SyncResult(franchise=None, updated_count=0)

    synced_at = int(time()) if now is None else now
    with atomic(conn):
        franchise = franchises.upsert_franchise_by_root_id(
            conn,
            root_external_id,
            name=franchise_name,
            graph_snapshot=graph.to_json(),
            synced_at=synced_at,
        )
        updated = works.bulk_set_franchise(conn, [w.id for w in members], franchise.id)

    logger.info(
        "Synced franchise %s (root %s): %d node(s), %d local work(s) linked",
        franchise.id, root_external_id, len(node_ids), updated,
    )
    return SyncResult(franchise=franchise, updated_count=updated)


def refresh_graph_only(
    conn: sqlite3.Connection,
    franchise_id: str,
    graph: RawGraph,
    name: Optional[str] = None,
    now: Optional[int] = None,
) -> Franchise:
    """Store a fresh snapshot without touching membership.

    Used by periodic refreshes, where the fetched graph may be partial and
    re-linking works from it is unsafe.

    Raises:
        ValueError: If ``franchise_id`` does not exist.
    """
    franchise = franchises.update_franchise_graph(
        conn, franchise_id, graph.to_json(), name=name, synced_at=now
    )
    logger.info("Refreshed graph snapshot of franchise %s", franchise_id)
    return franchise


def load_franchise_graph(conn: sqlite3.Connection, franchise_id: str) -> Optional[RawGraph]:
    """Parse the stored snapshot of a franchise.

    Returns ``None`` if the franchise is unknown, has no snapshot, or the
    snapshot cannot be parsed.
    """
    franchise = franchises.get_franchise(conn, franchise_id)
    if franchise is None or not franchise.graph_snapshot:
        return None
    try:
        return RawGraph.from_dict(json.loads(franchise.graph_snapshot))
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Unreadable graph snapshot for franchise %s: %s", franchise_id, exc)
        return None
