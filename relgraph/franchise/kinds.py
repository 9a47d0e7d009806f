"""Lookup tables keyed by :class:`~relgraph.db.models.RelationKind`.

Every table is total over the enum; :func:`_check_total` runs at import time
so adding a kind without extending a table fails immediately instead of
silently falling through to a default.
"""

from __future__ import annotations

from typing import Mapping, TypeVar

from relgraph.db.models import RelationKind

K = RelationKind
V = TypeVar("V")

#: Kinds that may be offered as "what to watch next".
NEXT_CANDIDATE_KINDS: frozenset[RelationKind] = frozenset(
    {K.SEQUEL, K.SIDE_STORY, K.SPIN_OFF, K.PARENT_STORY, K.FULL_STORY}
)

#: Selection priority for recommendations; lower is better.
SELECTION_PRIORITY: dict[RelationKind, int] = {
    K.SEQUEL: 0,
    K.SIDE_STORY: 1,
    K.SPIN_OFF: 2,
    K.PARENT_STORY: 3,
    K.FULL_STORY: 4,
    K.SUMMARY: 10,
    K.PREQUEL: 100,
    K.ADAPTATION: 100,
    K.CHARACTER: 100,
    K.ALTERNATIVE_VERSION: 100,
    K.ALTERNATIVE_SETTING: 100,
    K.OTHER: 100,
}

#: Display priority relative to the pivot work; negative sorts before it.
DISPLAY_PRIORITY: dict[RelationKind, int] = {
    K.PREQUEL: -100,
    K.PARENT_STORY: -50,
    K.FULL_STORY: 25,
    K.SIDE_STORY: 50,
    K.SPIN_OFF: 75,
    K.SEQUEL: 100,
    K.ALTERNATIVE_VERSION: 150,
    K.ALTERNATIVE_SETTING: 175,
    K.SUMMARY: 200,
    K.ADAPTATION: 200,
    K.CHARACTER: 200,
    K.OTHER: 200,
}

#: Kind seen from the other end of an edge.
INVERSE: dict[RelationKind, RelationKind] = {
    K.SEQUEL: K.PREQUEL,
    K.PREQUEL: K.SEQUEL,
    K.SIDE_STORY: K.SIDE_STORY,
    K.PARENT_STORY: K.PARENT_STORY,
    K.SUMMARY: K.SUMMARY,
    K.FULL_STORY: K.FULL_STORY,
    K.SPIN_OFF: K.SPIN_OFF,
    K.ADAPTATION: K.ADAPTATION,
    K.CHARACTER: K.CHARACTER,
    K.ALTERNATIVE_VERSION: K.ALTERNATIVE_VERSION,
    K.ALTERNATIVE_SETTING: K.ALTERNATIVE_SETTING,
    K.OTHER: K.OTHER,
}

LABELS: dict[RelationKind, str] = {
    K.SEQUEL: "Sequel",
    K.PREQUEL: "Prequel",
    K.SIDE_STORY: "Side story",
    K.PARENT_STORY: "Parent story",
    K.SUMMARY: "Summary",
    K.FULL_STORY: "Full story",
    K.SPIN_OFF: "Spin-off",
    K.ADAPTATION: "Adaptation",
    K.CHARACTER: "Shared characters",
    K.ALTERNATIVE_VERSION: "Alternative version",
    K.ALTERNATIVE_SETTING: "Alternative setting",
    K.OTHER: "Other",
}

REASONS: dict[RelationKind, str] = {
    K.SEQUEL: "Continues the story",
    K.PREQUEL: "Tells what came before",
    K.SIDE_STORY: "Side story from the same world",
    K.PARENT_STORY: "The main story",
    K.SUMMARY: "Recap of the season",
    K.FULL_STORY: "The full version",
    K.SPIN_OFF: "Spin-off with other characters",
    K.ADAPTATION: "Adaptation",
    K.CHARACTER: "Shares characters",
    K.ALTERNATIVE_VERSION: "Alternative version",
    K.ALTERNATIVE_SETTING: "Alternative setting",
    K.OTHER: "Related title",
}


def invert(kind: RelationKind) -> RelationKind:
    """Kind of the edge when traversed from target back to source."""
    return INVERSE[kind]


def selection_priority(kind: RelationKind) -> int:
    return SELECTION_PRIORITY[kind]


def display_priority(kind: RelationKind | None) -> int:
    """Display priority; a missing kind sits with the pivot at 0."""
    return 0 if kind is None else DISPLAY_PRIORITY[kind]


def _check_total(name: str, table: Mapping[RelationKind, V]) -> None:
    missing = set(RelationKind) - set(table)
    if missing:
        names = ", ".join(sorted(k.value for k in missing))
        raise RuntimeError(f"{name} is missing relation kinds: {names}")


for _name, _table in (
    ("SELECTION_PRIORITY", SELECTION_PRIORITY),
    ("DISPLAY_PRIORITY", DISPLAY_PRIORITY),
    ("INVERSE", INVERSE),
    ("LABELS", LABELS),
    ("REASONS", REASONS),
):
    _check_total(_name, _table)
