"""Database layer tests: connection, schema, works, relations, franchises."""

from __future__ import annotations

import sqlite3

import pytest

from relgraph.db import atomic, franchises, relations, works
from relgraph.db.migrations import current_version, init_db, migrate
from relgraph.db.models import RawGraph, RelationKind, WatchStatus, Work
from relgraph.db.relations import NewRelation


# ---------------------------------------------------------------------------
# connection / init
# ---------------------------------------------------------------------------

class TestConnection:
    def test_foreign_keys_enabled(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("PRAGMA foreign_keys").fetchone()
        assert row[0] == 1

    def test_wal_mode(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("PRAGMA journal_mode").fetchone()
        # In-memory DBs always return 'memory', on-disk returns 'wal'
        assert row[0] in ("wal", "memory")


class TestInitDb:
    def test_tables_exist(self, conn: sqlite3.Connection) -> None:
        tables = {
            r[0]
            for r in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        }
        assert {"works", "episodes", "relations", "franchises", "schema_version"} <= tables

    def test_current_version_zero_on_fresh_db(self, conn: sqlite3.Connection) -> None:
        assert current_version(conn) == 0

    def test_init_db_is_idempotent(self, conn: sqlite3.Connection) -> None:
        init_db(conn)

    def test_migrate_applies_pending_once(self, conn: sqlite3.Connection) -> None:
        pending = [(1, "ALTER TABLE works ADD COLUMN note TEXT")]
        assert migrate(conn, pending) == 1
        assert current_version(conn) == 1
        assert migrate(conn, pending) == 0


class TestAtomic:
    def test_commits_on_success(self, conn: sqlite3.Connection, make_work) -> None:
        work = make_work("A")
        with atomic(conn):
            conn.execute("UPDATE works SET year = 1999 WHERE id = ?", (work.id,))
        assert not conn.in_transaction
        assert works.get_work(conn, work.id).year == 1999

    def test_rolls_back_on_error(self, conn: sqlite3.Connection, make_work) -> None:
        work = make_work("A", year=2000)
        with pytest.raises(RuntimeError):
            with atomic(conn):
                conn.execute("UPDATE works SET year = 1999 WHERE id = ?", (work.id,))
                raise RuntimeError("boom")
        assert works.get_work(conn, work.id).year == 2000

    def test_nested_blocks_join_outer(self, conn: sqlite3.Connection, make_work) -> None:
        work = make_work("A", year=2000)
        with pytest.raises(RuntimeError):
            with atomic(conn):
                works.set_watch_status(conn, work.id, WatchStatus.WATCHING)
                raise RuntimeError("boom")
        assert works.get_work(conn, work.id).watch_status is WatchStatus.NOT_STARTED

    def test_failed_commit_does_not_poison_connection(self, tmp_path) -> None:
        path = tmp_path / "relgraph.db"
        conn = sqlite3.connect(str(path), factory=_LockedOnceConnection)
        conn.row_factory = sqlite3.Row
        init_db(conn)
        conn.fail_next_commit = True

        with pytest.raises(sqlite3.OperationalError, match="locked"):
            works.create_work(conn, external_id=1, name="Lost")
        assert not conn.in_transaction

        works.create_work(conn, external_id=2, name="Kept")
        assert not conn.in_transaction

        other = sqlite3.connect(str(path))
        try:
            seen = [r[0] for r in other.execute("SELECT external_id FROM works")]
        finally:
            other.close()
            conn.close()
        assert seen == [2]


class _LockedOnceConnection(sqlite3.Connection):
    """Connection whose next ``commit()`` fails as if the DB were locked."""

    fail_next_commit = False

    def commit(self) -> None:
        if self.fail_next_commit:
            self.fail_next_commit = False
            raise sqlite3.OperationalError("database is locked")
        super().commit()


# ---------------------------------------------------------------------------
# Works
# ---------------------------------------------------------------------------

class TestWorks:
    def test_create_work_returns_work(self, conn: sqlite3.Connection) -> None:
        work = works.create_work(conn, external_id=5, name="Cowboy Bebop", year=1998)
        assert isinstance(work, Work)
        assert work.external_id == 5
        assert work.watch_status is WatchStatus.NOT_STARTED
        assert work.franchise_id is None

    def test_external_id_unique(self, conn: sqlite3.Connection) -> None:
        works.create_work(conn, external_id=5, name="A")
        with pytest.raises(sqlite3.IntegrityError):
            works.create_work(conn, external_id=5, name="B")

    def test_get_work_not_found(self, conn: sqlite3.Connection) -> None:
        assert works.get_work(conn, "missing") is None

    def test_find_by_external_id(self, conn: sqlite3.Connection, make_work) -> None:
        work = make_work("A", external_id=42)
        assert works.find_work_by_external_id(conn, 42).id == work.id
        assert works.find_work_by_external_id(conn, 43) is None

    def test_set_watch_status(self, conn: sqlite3.Connection, make_work) -> None:
        work = make_work("A")
        updated = works.set_watch_status(conn, work.id, WatchStatus.COMPLETED, now=123)
        assert updated.watch_status is WatchStatus.COMPLETED
        assert updated.updated_at == 123

    def test_set_watch_status_missing_raises(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError, match="Work not found"):
            works.set_watch_status(conn, "missing", WatchStatus.COMPLETED)

    def test_recently_completed_newest_first(self, conn: sqlite3.Connection, make_work) -> None:
        a, b, c = make_work("A"), make_work("B"), make_work("C")
        works.set_watch_status(conn, a.id, WatchStatus.COMPLETED, now=100)
        works.set_watch_status(conn, b.id, WatchStatus.COMPLETED, now=300)
        works.set_watch_status(conn, c.id, WatchStatus.WATCHING, now=400)
        assert [w.id for w in works.list_recently_completed_works(conn, 10)] == [b.id, a.id]
        assert [w.id for w in works.list_recently_completed_works(conn, 1)] == [b.id]

    def test_episodes(self, conn: sqlite3.Connection, make_work) -> None:
        work = make_work("A")
        assert works.first_episode_id(conn, work.id) is None
        works.add_episode(conn, work.id, 2)
        first = works.add_episode(conn, work.id, 1)
        assert works.first_episode_id(conn, work.id) == first
        assert works.count_episodes(conn, work.id) == 2


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------

class TestRelations:
    def test_replace_is_wholesale(self, conn: sqlite3.Connection, make_work) -> None:
        src = make_work("Src")
        relations.replace_relations_for_source(
            conn, src.id, [NewRelation(1, RelationKind.SEQUEL), NewRelation(2, RelationKind.OTHER)]
        )
        relations.replace_relations_for_source(conn, src.id, [NewRelation(3, RelationKind.PREQUEL)])
        edges = relations.list_outgoing(conn, src.id)
        assert [(e.target_external_id, e.relation_kind) for e in edges] == [
            (3, RelationKind.PREQUEL)
        ]

    def test_replace_drops_duplicate_pairs(self, conn: sqlite3.Connection, make_work) -> None:
        src = make_work("Src")
        count = relations.replace_relations_for_source(
            conn,
            src.id,
            [
                NewRelation(1, RelationKind.SEQUEL, target_name="first"),
                NewRelation(1, RelationKind.SEQUEL, target_name="second"),
                NewRelation(1, RelationKind.SIDE_STORY),
            ],
        )
        assert count == 2
        edges = relations.list_outgoing(conn, src.id)
        assert edges[0].target_name == "first"

    def test_outgoing_keeps_insertion_order_and_filters(self, conn, make_work) -> None:
        src = make_work("Src")
        relations.replace_relations_for_source(
            conn,
            src.id,
            [
                NewRelation(3, RelationKind.SPIN_OFF),
                NewRelation(1, RelationKind.SEQUEL),
                NewRelation(2, RelationKind.SUMMARY),
            ],
        )
        assert [e.target_external_id for e in relations.list_outgoing(conn, src.id)] == [3, 1, 2]
        filtered = relations.list_outgoing(conn, src.id, kinds=[RelationKind.SEQUEL])
        assert [e.target_external_id for e in filtered] == [1]
        assert relations.list_outgoing(conn, src.id, kinds=[]) == []

    def test_target_resolves_once_imported(self, conn, make_work) -> None:
        src = make_work("Src")
        relations.replace_relations_for_source(conn, src.id, [NewRelation(77, RelationKind.SEQUEL)])
        assert relations.list_outgoing(conn, src.id)[0].other_work is None
        target = make_work("Later", external_id=77)
        assert relations.list_outgoing(conn, src.id)[0].other_work.id == target.id

    def test_incoming_carries_source(self, conn, make_work) -> None:
        src = make_work("Src")
        dst = make_work("Dst", external_id=55)
        relations.replace_relations_for_source(conn, src.id, [NewRelation(55, RelationKind.SEQUEL)])
        incoming = relations.list_incoming(conn, dst.id)
        assert len(incoming) == 1
        assert incoming[0].other_work.id == src.id
        assert relations.list_incoming(conn, "missing") == []

    def test_edges_cascade_with_source(self, conn, make_work) -> None:
        src = make_work("Src")
        relations.replace_relations_for_source(conn, src.id, [NewRelation(1, RelationKind.SEQUEL)])
        with conn:
            conn.execute("DELETE FROM works WHERE id = ?", (src.id,))
        assert conn.execute("SELECT COUNT(*) FROM relations").fetchone()[0] == 0


# ---------------------------------------------------------------------------
# Franchises
# ---------------------------------------------------------------------------

class TestFranchises:
    def test_upsert_creates_then_overwrites(self, conn: sqlite3.Connection) -> None:
        first = franchises.upsert_franchise_by_root_id(conn, 10, "Old", "{}", synced_at=100)
        second = franchises.upsert_franchise_by_root_id(conn, 10, "New", '{"a": 1}', synced_at=200)
        assert second.id == first.id
        assert second.name == "New"
        assert second.graph_snapshot == '{"a": 1}'
        assert second.graph_synced_at == 200
        assert second.created_at == first.created_at

    def test_find_by_root_id_missing(self, conn: sqlite3.Connection) -> None:
        assert franchises.find_franchise_by_root_id(conn, 1) is None
        assert franchises.get_franchise(conn, "missing") is None

    def test_update_graph_keeps_name_unless_given(self, conn: sqlite3.Connection) -> None:
        f = franchises.upsert_franchise_by_root_id(conn, 10, "Name", None, synced_at=1)
        updated = franchises.update_franchise_graph(conn, f.id, "{}", synced_at=5)
        assert updated.name == "Name"
        assert updated.graph_synced_at == 5
        renamed = franchises.update_franchise_graph(conn, f.id, "{}", name="Other")
        assert renamed.name == "Other"

    def test_synced_at_only_sets_graph_synced_at(self, conn: sqlite3.Connection) -> None:
        f = franchises.upsert_franchise_by_root_id(conn, 10, "Name", "{}", synced_at=0)
        assert f.graph_synced_at == 0
        assert f.created_at > 0
        assert f.updated_at > 0
        updated = franchises.update_franchise_graph(conn, f.id, "{}", synced_at=0)
        assert updated.graph_synced_at == 0
        assert updated.updated_at > 0

    def test_stale_listing_rejects_negative_limit(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError, match="limit must be >= 0"):
            franchises.list_stale_franchises(conn, synced_before=0, limit=-1)

    def test_update_graph_missing_raises(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError, match="Franchise not found"):
            franchises.update_franchise_graph(conn, "missing", "{}")


# ---------------------------------------------------------------------------
# Raw graph parsing
# ---------------------------------------------------------------------------

class TestRawGraph:
    def test_parses_provider_native_shape(self) -> None:
        graph = RawGraph.from_dict(
            {
                "nodes": [{"id": 1, "name": "A", "year": 2001, "image_url": "/a.jpg"}, {"id": 2}],
                "links": [{"source_id": 1, "target_id": 2, "relation": "sequel"}],
            }
        )
        assert graph.node_ids == [1, 2]
        assert graph.nodes[0].poster_url == "/a.jpg"
        assert graph.edges[0].kind is RelationKind.SEQUEL

    def test_unknown_kind_maps_to_other(self) -> None:
        graph = RawGraph.from_dict(
            {"nodes": [], "edges": [{"fromExternalId": 1, "toExternalId": 2, "kind": "remake"}]}
        )
        assert graph.edges[0].kind is RelationKind.OTHER

    def test_parse_kind_variants(self) -> None:
        assert RelationKind.parse("side_story") is RelationKind.SIDE_STORY
        assert RelationKind.parse("SPIN_OFF") is RelationKind.SPIN_OFF
        assert RelationKind.parse(None) is RelationKind.OTHER
