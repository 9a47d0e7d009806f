"""Result types returned by the franchise services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from relgraph.db.models import Franchise, RelationKind, WatchStatus, Work


@dataclass
class SyncResult:
    franchise: Optional[Franchise]
    updated_count: int


@dataclass
class Suggestion:
    """A single "watch next" candidate.

    Fields prefer the live local work and fall back to the data denormalised
    on the edge; ``work_id`` and ``first_episode_id`` stay ``None`` until the
    target is imported.  ``poster`` is ``None`` when neither the local work
    nor the edge carries one.
    """

    work_id: Optional[str]
    external_id: int
    name: str
    poster: Optional[str]
    year: Optional[int]
    relation_kind: RelationKind
    relation_label: str
    reason: str
    in_library: bool
    watch_status: Optional[WatchStatus]
    episode_count: Optional[int]
    loaded_episode_count: int
    first_episode_id: Optional[str]


@dataclass
class GlobalSuggestion:
    completed_work: Work
    suggestion: Suggestion


@dataclass
class WatchItem:
    """A work placed relative to the pivot of a related view."""

    work: Work
    relation_kind: Optional[RelationKind] = None
    is_pivot: bool = False

    @property
    def year(self) -> Optional[int]:
        return self.work.year


@dataclass
class Epoch:
    year: Optional[int]
    items: list[WatchItem] = field(default_factory=list)
