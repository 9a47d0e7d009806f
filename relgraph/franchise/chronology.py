"""Chronological watch order over a franchise graph snapshot.

Only SEQUEL and PREQUEL edges carry ordering information: ``a -SEQUEL-> b``
puts ``b`` after ``a`` and ``a -PREQUEL-> b`` puts ``b`` before ``a``.  Nodes
with no predecessor are walked in release-year order, each one depth-first
with predecessors emitted before the node itself.  Cycles are broken by the
visited set; anything they leave unvisited is appended in node order.
"""

from __future__ import annotations

from typing import Optional

from relgraph.db.models import RawGraph, RelationKind


def compute_chronological_order(graph: RawGraph) -> dict[int, int]:
    """Map each node's external id to its 1-based watch position."""
    node_ids = list(dict.fromkeys(graph.node_ids))
    known = set(node_ids)
    predecessors: dict[int, list[int]] = {nid: [] for nid in node_ids}

    for edge in graph.edges:
        src, dst = edge.from_external_id, edge.to_external_id
        if src not in known or dst not in known:
            continue
        if edge.kind is RelationKind.SEQUEL:
            predecessors[dst].append(src)
        elif edge.kind is RelationKind.PREQUEL:
            predecessors[src].append(dst)

    years = {n.external_id: n.year or 0 for n in graph.nodes}
    roots = sorted((nid for nid in node_ids if not predecessors[nid]), key=lambda n: years[n])

    visited: set[int] = set()
    ordered: list[int] = []

    def visit(nid: int) -> None:
        if nid in visited:
            return
        visited.add(nid)
        for dep in predecessors[nid]:
            visit(dep)
        ordered.append(nid)

    for nid in roots:
        visit(nid)
    for nid in node_ids:
        visit(nid)

    return {nid: position for position, nid in enumerate(ordered, start=1)}


def season_number(graph: Optional[RawGraph], external_id: Optional[int]) -> int:
    """Position of *external_id* in the franchise, defaulting to 1."""
    if graph is None or not external_id:
        return 1
    return compute_chronological_order(graph).get(external_id, 1)
