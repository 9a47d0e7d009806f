"""Watch order and timeline grouping for a related view.

Items are ranked by display priority (prequels and parent stories before the
pivot, everything else after it), then by year with unknown years last.  The
pivot itself never takes part in a comparison: it belongs to the priority-0
band and keeps its input position inside that band.
"""

from __future__ import annotations

import math
from typing import Literal, Optional, Sequence

from relgraph.db.models import RelationKind
from relgraph.franchise.kinds import display_priority
from relgraph.franchise.models import Epoch, WatchItem

Position = Literal["before", "current", "after"]


def _year_key(item: WatchItem) -> float:
    return math.inf if item.year is None else item.year


def _priority(item: WatchItem) -> int:
    return 0 if item.is_pivot else display_priority(item.relation_kind)


def order(items: Sequence[WatchItem]) -> list[WatchItem]:
    """Return *items* in watch order (stable, idempotent)."""
    bands: dict[int, list[tuple[int, WatchItem]]] = {}
    for index, item in enumerate(items):
        bands.setdefault(_priority(item), []).append((index, item))

    result: list[WatchItem] = []
    for priority in sorted(bands):
        band = bands[priority]
        pinned = [(pos, item) for pos, (_, item) in enumerate(band) if item.is_pivot]
        others = sorted(
            (item for _, item in band if not item.is_pivot), key=_year_key
        )
        for pos, item in pinned:
            others.insert(pos, item)
        result.extend(others)
    return result


def group_by_epoch(items: Sequence[WatchItem]) -> list[Epoch]:
    """Split the watch order into runs of consecutive items sharing a year.

    Items without a year always get an epoch of their own.
    """
    epochs: list[Epoch] = []
    for item in order(items):
        last = epochs[-1] if epochs else None
        if last is not None and item.year is not None and last.year == item.year:
            last.items.append(item)
        else:
            epochs.append(Epoch(year=item.year, items=[item]))
    return epochs


def watch_order_position(kind: Optional[RelationKind], is_pivot: bool = False) -> Position:
    """Where a related work falls relative to the pivot."""
    if is_pivot:
        return "current"
    if kind is None:
        return "after"
    priority = display_priority(kind)
    if priority < 0:
        return "before"
    if priority > 0:
        return "after"
    return "current"
