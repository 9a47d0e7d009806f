"""Select franchises whose cached graph is due for a refresh."""

from __future__ import annotations

import sqlite3
from time import time
from typing import Optional

from relgraph.config import settings
from relgraph.db import franchises
from relgraph.db.models import Franchise


def find_stale(
    conn: sqlite3.Connection,
    limit: Optional[int] = None,
    now: Optional[int] = None,
) -> list[Franchise]:
    """Franchises never synced or synced before the staleness horizon.

    Only franchises with a root key are considered.  Results are ordered
    oldest first (never-synced before all others) and capped at *limit*,
    which defaults to ``settings.stale_batch_limit``; a negative limit
    raises :class:`ValueError`.
    """
    current = int(time()) if now is None else now
    horizon = current - settings.staleness_seconds
    batch = settings.stale_batch_limit if limit is None else limit
    return franchises.list_stale_franchises(conn, synced_before=horizon, limit=batch)
