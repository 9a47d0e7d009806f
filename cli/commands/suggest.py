"""Commands for recommendations and watch order."""

from __future__ import annotations

from typing import Optional

import typer

from relgraph.db import get_connection, init_db
from relgraph.franchise import (
    collect_related,
    group_by_epoch,
    order,
    suggest_global_next,
    suggest_next,
)

from cli.rendering import render_order, render_suggestion, render_timeline

suggest_app = typer.Typer(help="Watch-next recommendations.", no_args_is_help=True)


@suggest_app.command("next")
def suggest_next_cmd(
    work_id: str = typer.Argument(..., help="Work ID."),
) -> None:
    """Show the best follow-up for a work."""
    conn = get_connection()
    init_db(conn)
    try:
        suggestion = suggest_next(conn, work_id)
    finally:
        conn.close()
    if suggestion is None:
        typer.echo("[suggest next] No suggestion.")
        return
    typer.echo(render_suggestion(suggestion))


@suggest_app.command("global")
def suggest_global_cmd(
    window: Optional[int] = typer.Option(None, min=0, help="Recently completed works to scan."),
) -> None:
    """Find one unstarted follow-up among recently completed works."""
    conn = get_connection()
    init_db(conn)
    try:
        hit = suggest_global_next(conn, window=window)
    finally:
        conn.close()
    if hit is None:
        typer.echo("[suggest global] No suggestion.")
        return
    typer.echo(f"After {hit.completed_work.name!r}:")
    typer.echo(render_suggestion(hit.suggestion))


def order_cmd(
    work_id: str = typer.Argument(..., help="Work ID to centre the view on."),
    epochs: bool = typer.Option(False, "--epochs", help="Group by release year."),
) -> None:
    """Print the watch order of a work and its related titles."""
    conn = get_connection()
    init_db(conn)
    try:
        items = collect_related(conn, work_id)
    finally:
        conn.close()
    if not items:
        typer.echo(f"❌ Work {work_id} not found.")
        raise typer.Exit(code=1)
    if epochs:
        typer.echo(render_timeline(group_by_epoch(items)))
    else:
        typer.echo(render_order(order(items)))
