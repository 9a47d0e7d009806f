"""Commands for syncing and refreshing franchise graphs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from relgraph.db import get_connection, init_db, works
from relgraph.db.franchises import list_franchises
from relgraph.db.models import RawGraph
from relgraph.franchise import (
    compute_chronological_order,
    find_stale,
    franchise_name,
    load_franchise_graph,
    refresh_graph_only,
    related_from_graph,
    root_external_id,
    sync_franchise_from_graph,
    sync_relations,
)

franchise_app = typer.Typer(help="Sync and inspect franchise graphs.", no_args_is_help=True)
relations_app = typer.Typer(help="Relation edge operations.", no_args_is_help=True)


def load_graph_file(path: Path) -> RawGraph:
    """Read a provider graph from a JSON file, exiting on bad input."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"❌ Graph file not found: {path}")
        raise typer.Exit(code=1)
    except json.JSONDecodeError as exc:
        typer.echo(f"❌ Invalid JSON in {path}: {exc}")
        raise typer.Exit(code=1)
    try:
        return RawGraph.from_dict(data)
    except (TypeError, ValueError, AttributeError) as exc:
        typer.echo(f"❌ Malformed graph in {path}: {exc}")
        raise typer.Exit(code=1)


@franchise_app.command("sync")
def franchise_sync(
    graph_file: Path = typer.Argument(..., help="Provider graph JSON file."),
    name: Optional[str] = typer.Option(None, help="Override the franchise name."),
) -> None:
    """Upsert the franchise for a graph and link its local works."""
    graph = load_graph_file(graph_file)
    root = root_external_id(graph)
    if root is None:
        typer.echo("[franchise sync] Graph has no nodes, nothing to do.")
        return

    conn = get_connection()
    init_db(conn)
    try:
        result = sync_franchise_from_graph(conn, graph, root, name or franchise_name(graph))
    finally:
        conn.close()

    if result.franchise is None:
        typer.echo(f"[franchise sync] No local works in graph {root}, skipped.")
        return
    typer.echo(
        f"[franchise sync] {result.franchise.name!r} ({result.franchise.id})  "
        f"root={root}  linked={result.updated_count}"
    )


@franchise_app.command("refresh")
def franchise_refresh(
    franchise_id: str = typer.Argument(..., help="Franchise ID."),
    graph_file: Path = typer.Argument(..., help="Provider graph JSON file."),
    name: Optional[str] = typer.Option(None, help="New franchise name."),
) -> None:
    """Store a fresh graph snapshot without touching membership."""
    graph = load_graph_file(graph_file)
    conn = get_connection()
    init_db(conn)
    try:
        franchise = refresh_graph_only(conn, franchise_id, graph, name=name)
    except ValueError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)
    finally:
        conn.close()
    typer.echo(f"[franchise refresh] {franchise.name!r} snapshot updated.")


@franchise_app.command("stale")
def franchise_stale(
    limit: Optional[int] = typer.Option(None, min=0, help="Maximum franchises to list."),
) -> None:
    """List franchises whose graph is due for a refresh."""
    conn = get_connection()
    init_db(conn)
    try:
        stale = find_stale(conn, limit=limit)
    finally:
        conn.close()
    if not stale:
        typer.echo("[franchise stale] All franchise graphs are fresh.")
        return
    for f in stale:
        synced = f.graph_synced_at if f.graph_synced_at is not None else "never"
        typer.echo(f"  {f.id}  root={f.root_external_id}  synced={synced}  {f.name!r}")


@franchise_app.command("list")
def franchise_list() -> None:
    """List all franchises."""
    conn = get_connection()
    init_db(conn)
    try:
        rows = list_franchises(conn)
    finally:
        conn.close()
    if not rows:
        typer.echo("[franchise list] No franchises found.")
        return
    for f in rows:
        typer.echo(f"  {f.id}  root={f.root_external_id}  {f.name!r}")


@franchise_app.command("show")
def franchise_show(
    franchise_id: str = typer.Argument(..., help="Franchise ID."),
) -> None:
    """Print the chronological order stored in a franchise's graph."""
    conn = get_connection()
    init_db(conn)
    try:
        graph = load_franchise_graph(conn, franchise_id)
        if graph is None:
            typer.echo(f"❌ No graph stored for franchise {franchise_id}.")
            raise typer.Exit(code=1)
        local = {w.external_id for w in works.list_works_by_external_ids(conn, graph.node_ids)}
    finally:
        conn.close()

    positions = compute_chronological_order(graph)
    by_id = {n.external_id: n for n in graph.nodes}
    for external_id, position in sorted(positions.items(), key=lambda kv: kv[1]):
        node = by_id[external_id]
        marker = "●" if external_id in local else "○"
        year = node.year if node.year is not None else "????"
        typer.echo(f"  {position:>3}. {marker} {year}  {node.name or external_id}")


@relations_app.command("sync")
def relations_sync(
    graph_file: Path = typer.Argument(..., help="Provider graph JSON file."),
) -> None:
    """Replace the outgoing edges of every local work found in a graph."""
    graph = load_graph_file(graph_file)
    conn = get_connection()
    init_db(conn)
    try:
        members = works.list_works_by_external_ids(conn, graph.node_ids)
        total = 0
        for work in members:
            total += sync_relations(conn, work.id, related_from_graph(graph, work.external_id))
    finally:
        conn.close()
    typer.echo(f"[relations sync] {total} edge(s) written for {len(members)} work(s).")
