"""Write a work's outgoing relation edges from provider data."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from relgraph.db import relations
from relgraph.db.models import RawGraph, RelationKind
from relgraph.db.relations import NewRelation

logger = logging.getLogger(__name__)

# Media kinds the library never stores.
SKIPPED_MEDIA_KINDS = frozenset({"music"})


@dataclass
class RelatedWork:
    """A related title as reported by the provider for one source work."""

    external_id: int
    kind: Any
    name: Optional[str] = None
    poster_url: Optional[str] = None
    year: Optional[int] = None
    media_kind: Optional[str] = None


def sync_relations(
    conn: sqlite3.Connection,
    source_work_id: str,
    related: Iterable[RelatedWork],
) -> int:
    """Replace every outgoing edge of *source_work_id* with *related*.

    Unrecognised relation kinds are stored as ``OTHER``.  Returns the number
    of edges written.
    """
    edges = []
    for item in related:
        if item.media_kind in SKIPPED_MEDIA_KINDS:
            continue
        kind = RelationKind.parse(item.kind)
        raw = getattr(item.kind, "value", item.kind)
        if kind is RelationKind.OTHER and str(raw).strip().lower() != "other":
            logger.debug("Unknown relation kind %r mapped to OTHER", item.kind)
        edges.append(
            NewRelation(
                target_external_id=item.external_id,
                relation_kind=kind,
                target_name=item.name,
                target_poster_url=item.poster_url,
                target_year=item.year,
                target_media_kind=item.media_kind,
            )
        )
    count = relations.replace_relations_for_source(conn, source_work_id, edges)
    logger.info("Stored %d relation(s) for work %s", count, source_work_id)
    return count


def related_from_graph(graph: RawGraph, source_external_id: int) -> list[RelatedWork]:
    """Outgoing edges of one node of *graph*, filled in from node data."""
    nodes = {n.external_id: n for n in graph.nodes}
    related = []
    for edge in graph.edges:
        if edge.from_external_id != source_external_id:
            continue
        target = nodes.get(edge.to_external_id)
        related.append(
            RelatedWork(
                external_id=edge.to_external_id,
                kind=edge.kind,
                name=target.name if target else None,
                poster_url=target.poster_url if target else None,
                year=target.year if target else None,
                media_kind=target.kind if target else None,
            )
        )
    return related
