"""Utilities for rendering watch orders and suggestions in the CLI."""

from __future__ import annotations

from typing import List

from relgraph.franchise.models import Epoch, Suggestion, WatchItem
from relgraph.franchise.watch_order import watch_order_position

_MARKERS = {"before": "<", "current": "*", "after": ">"}


def render_item(item: WatchItem) -> str:
    """One line per work: position marker, year, title and relation."""
    position = watch_order_position(item.relation_kind, item.is_pivot)
    year = item.year if item.year is not None else "????"
    relation = "current" if item.is_pivot else (
        item.relation_kind.value if item.relation_kind else "related"
    )
    return (
        f"{_MARKERS[position]} {year}  {item.work.name}  "
        f"[{relation}]  {item.work.watch_status.value}"
    )


def render_order(items: List[WatchItem]) -> str:
    return "\n".join(render_item(i) for i in items)


def render_timeline(epochs: List[Epoch]) -> str:
    """Render epochs as a tree, one branch per year group.

    Example::

        2019
        └── < 2019  Show Zero  [PREQUEL]  COMPLETED
        2020
        ├── * 2020  Show  [current]  WATCHING
        └── > 2020  Show OVA  [SIDE_STORY]  NOT_STARTED
    """
    lines: list[str] = []
    for epoch in epochs:
        lines.append(str(epoch.year) if epoch.year is not None else "Unknown year")
        count = len(epoch.items)
        for i, item in enumerate(epoch.items):
            connector = "└── " if i == count - 1 else "├── "
            lines.append(f"{connector}{render_item(item)}")
    return "\n".join(lines)


def render_suggestion(suggestion: Suggestion) -> str:
    year = f" ({suggestion.year})" if suggestion.year is not None else ""
    lines = [
        f"{suggestion.relation_label}: {suggestion.name}{year}",
        f"  {suggestion.reason}",
    ]
    if suggestion.in_library:
        status = suggestion.watch_status.value if suggestion.watch_status else "?"
        lines.append(
            f"  In library: {suggestion.work_id}  status={status}  "
            f"episodes={suggestion.loaded_episode_count}/{suggestion.episode_count}"
        )
        if suggestion.first_episode_id:
            lines.append(f"  First episode: {suggestion.first_episode_id}")
    else:
        lines.append(f"  Not in library (external id {suggestion.external_id})")
    return "\n".join(lines)
