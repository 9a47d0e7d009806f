"""Pick the single best "watch next" title for a work.

Only forward-looking edges are candidates (see
:data:`~relgraph.franchise.kinds.NEXT_CANDIDATE_KINDS`).  Among them the
lowest selection priority wins; ties keep the first edge in fetch order.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from relgraph.config import settings
from relgraph.db import relations, works
from relgraph.db.models import Relation, WatchStatus
from relgraph.franchise.kinds import LABELS, NEXT_CANDIDATE_KINDS, REASONS, selection_priority
from relgraph.franchise.models import GlobalSuggestion, Suggestion

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown title"


def suggest_next(conn: sqlite3.Connection, work_id: str) -> Optional[Suggestion]:
    """Return the best follow-up for *work_id*, or ``None``."""
    candidates = relations.list_outgoing(conn, work_id, kinds=NEXT_CANDIDATE_KINDS)
    if not candidates:
        return None

    # min() keeps the first of equal keys, so fetch order breaks ties.
    best = min(candidates, key=lambda r: selection_priority(r.relation_kind))
    return _build_suggestion(conn, best)


def suggest_global_next(
    conn: sqlite3.Connection, window: Optional[int] = None
) -> Optional[GlobalSuggestion]:
    """Find one actionable recommendation among recently completed works.

    Scans the *window* most recently updated COMPLETED works and returns the
    first whose suggestion is already in the library, not started, and has a
    playable episode.  ``None`` means nothing was found within the window.

    Raises:
        ValueError: If *window* is negative.
    """
    limit = settings.recent_completed_window if window is None else window
    for completed in works.list_recently_completed_works(conn, limit):
        suggestion = suggest_next(conn, completed.id)
        if (
            suggestion is not None
            and suggestion.in_library
            and suggestion.watch_status is WatchStatus.NOT_STARTED
            and suggestion.first_episode_id
        ):
            return GlobalSuggestion(completed_work=completed, suggestion=suggestion)
    logger.debug("No actionable suggestion in the last %d completed works", limit)
    return None


def _build_suggestion(conn: sqlite3.Connection, edge: Relation) -> Suggestion:
    target = edge.other_work
    kind = edge.relation_kind
    if target is None:
        return Suggestion(
            work_id=None,
            external_id=edge.target_external_id,
            name=edge.target_name or UNKNOWN_TITLE,
            poster=edge.target_poster_url,
            year=edge.target_year,
            relation_kind=kind,
            relation_label=LABELS[kind],
            reason=REASONS[kind],
            in_library=False,
            watch_status=None,
            episode_count=None,
            loaded_episode_count=0,
            first_episode_id=None,
        )

    return Suggestion(
        work_id=target.id,
        external_id=target.external_id,
        name=target.name or edge.target_name or UNKNOWN_TITLE,
        poster=target.poster_path or edge.target_poster_url,
        year=target.year if target.year is not None else edge.target_year,
        relation_kind=kind,
        relation_label=LABELS[kind],
        reason=REASONS[kind],
        in_library=True,
        watch_status=target.watch_status,
        episode_count=target.episode_count,
        loaded_episode_count=works.count_episodes(conn, target.id),
        first_episode_id=works.first_episode_id(conn, target.id),
    )
