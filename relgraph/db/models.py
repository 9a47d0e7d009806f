"""Dataclass models representing DB rows and the provider's raw graph.

These are plain Python objects, not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WatchStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    WATCHING = "WATCHING"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"
    DROPPED = "DROPPED"
    PLANNED = "PLANNED"


class RelationKind(str, Enum):
    SEQUEL = "SEQUEL"
    PREQUEL = "PREQUEL"
    SIDE_STORY = "SIDE_STORY"
    PARENT_STORY = "PARENT_STORY"
    SUMMARY = "SUMMARY"
    FULL_STORY = "FULL_STORY"
    SPIN_OFF = "SPIN_OFF"
    ADAPTATION = "ADAPTATION"
    CHARACTER = "CHARACTER"
    ALTERNATIVE_VERSION = "ALTERNATIVE_VERSION"
    ALTERNATIVE_SETTING = "ALTERNATIVE_SETTING"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: Any) -> RelationKind:
        """Map a provider string (``"side_story"``, ``"SEQUEL"``…) to a kind.

        Anything unrecognised becomes :attr:`OTHER`.
        """
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


@dataclass
class Work:
    id: str
    external_id: int
    name: str
    year: int | None
    watch_status: WatchStatus
    franchise_id: str | None
    poster_path: str | None
    episode_count: int
    created_at: int
    updated_at: int


@dataclass
class Relation:
    id: str
    source_work_id: str
    target_external_id: int
    relation_kind: RelationKind
    target_name: str | None
    target_poster_url: str | None
    target_year: int | None
    target_media_kind: str | None
    created_at: int
    # Local work on the far end of the edge (target for outgoing, source for
    # incoming listings); ``None`` until that work is imported.
    other_work: Work | None = None


@dataclass
class Franchise:
    id: str
    name: str
    root_external_id: int | None
    graph_snapshot: str | None
    graph_synced_at: int | None
    created_at: int
    updated_at: int


# ---------------------------------------------------------------------------
# Provider graph
# ---------------------------------------------------------------------------

@dataclass
class GraphNode:
    external_id: int
    name: str | None = None
    year: int | None = None
    kind: str | None = None
    poster_url: str | None = None


@dataclass
class GraphEdge:
    from_external_id: int
    to_external_id: int
    kind: RelationKind


@dataclass
class RawGraph:
    """A franchise graph as returned by the metadata provider."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    @property
    def node_ids(self) -> list[int]:
        return [n.external_id for n in self.nodes]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawGraph:
        """Build a graph from the provider payload.

        Accepts both ``{nodes: [{externalId}], edges: [{fromExternalId,
        toExternalId, kind}]}`` and the provider's native
        ``{nodes: [{id}], links: [{source_id, target_id, relation}]}``.
        """
        nodes = [
            GraphNode(
                external_id=int(_first(n, "externalId", "external_id", "id")),
                name=_first(n, "name"),
                year=_first(n, "year"),
                kind=_first(n, "kind"),
                poster_url=_first(n, "posterUrl", "poster_url", "image_url"),
            )
            for n in data.get("nodes") or []
        ]
        raw_edges = data.get("edges")
        if raw_edges is None:
            raw_edges = data.get("links") or []
        edges = [
            GraphEdge(
                from_external_id=int(_first(e, "fromExternalId", "from_external_id", "source_id")),
                to_external_id=int(_first(e, "toExternalId", "to_external_id", "target_id")),
                kind=RelationKind.parse(_first(e, "kind", "relation")),
            )
            for e in raw_edges
        ]
        return cls(nodes=nodes, edges=edges)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "externalId": n.external_id,
                    "name": n.name,
                    "year": n.year,
                    "kind": n.kind,
                    "posterUrl": n.poster_url,
                }
                for n in self.nodes
            ],
            "edges": [
                {
                    "fromExternalId": e.from_external_id,
                    "toExternalId": e.to_external_id,
                    "kind": e.kind.value,
                }
                for e in self.edges
            ],
        }

    def to_json(self) -> str:
        """Serialise the graph for storage as a franchise snapshot."""
        return json.dumps(self.to_dict(), ensure_ascii=False)


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None

