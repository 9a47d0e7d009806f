"""Shared fixtures.

All DB tests use an in-memory SQLite database so they are fast, isolated and
never touch ``~/.relgraph_data``.
"""

from __future__ import annotations

import itertools
import sqlite3
from typing import Callable, Generator

import pytest

from relgraph.db import get_connection, init_db, works
from relgraph.db.models import RawGraph, Work


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture()
def make_work(conn: sqlite3.Connection) -> Callable[..., Work]:
    """Factory creating works with unique external ids unless given."""
    counter = itertools.count(9000)

    def _make(name: str = "Work", external_id: int | None = None, **kwargs) -> Work:
        ext = next(counter) if external_id is None else external_id
        return works.create_work(conn, external_id=ext, name=name, **kwargs)

    return _make


def graph_of(
    node_ids: list[int],
    edges: list[tuple[int, int, str]] | None = None,
    years: dict[int, int] | None = None,
) -> RawGraph:
    """Build a provider graph from ids and ``(from, to, kind)`` triples."""
    years = years or {}
    return RawGraph.from_dict(
        {
            "nodes": [
                {"externalId": n, "name": f"Title {n}", "year": years.get(n)}
                for n in node_ids
            ],
            "edges": [
                {"fromExternalId": a, "toExternalId": b, "kind": k}
                for a, b, k in edges or []
            ],
        }
    )
