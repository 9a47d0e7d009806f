"""Franchise services: canonical sync, recommendations and watch order.

Public re-exports so callers can write::

    from relgraph.franchise import suggest_next, order, group_by_epoch
"""

from relgraph.franchise.canonicalizer import (
    franchise_name,
    load_franchise_graph,
    refresh_graph_only,
    root_external_id,
    sync_franchise_from_graph,
)
from relgraph.franchise.chronology import compute_chronological_order, season_number
from relgraph.franchise.kinds import invert
from relgraph.franchise.ranker import suggest_global_next, suggest_next
from relgraph.franchise.related import collect_related
from relgraph.franchise.relations import RelatedWork, related_from_graph, sync_relations
from relgraph.franchise.staleness import find_stale
from relgraph.franchise.watch_order import group_by_epoch, order, watch_order_position

# Name used by callers that schedule periodic refreshes.
find_stale_graph_franchises = find_stale

__all__ = [
    "RelatedWork",
    "collect_related",
    "compute_chronological_order",
    "find_stale",
    "find_stale_graph_franchises",
    "franchise_name",
    "group_by_epoch",
    "invert",
    "load_franchise_graph",
    "order",
    "refresh_graph_only",
    "related_from_graph",
    "root_external_id",
    "season_number",
    "suggest_global_next",
    "suggest_next",
    "sync_franchise_from_graph",
    "sync_relations",
    "watch_order_position",
]
