"""relgraph CLI: entry-point for all franchise graph operations.

Usage:
    relgraph --help

Sub-command groups:
    db         → database setup
    franchise  → graph sync, refresh and staleness scan
    relations  → relation edge sync
    suggest    → watch-next recommendations
    order      → watch order of a work's related titles
"""

from __future__ import annotations

import logging

import typer

from relgraph.config import settings
from relgraph.db import get_connection, init_db

from cli.commands.franchise import franchise_app, relations_app
from cli.commands.suggest import order_cmd, suggest_app

app = typer.Typer(
    name="relgraph",
    help="Franchise relation graph CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level."),
) -> None:
    """Configure logging for every command."""
    level = logging.INFO if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


app.add_typer(franchise_app, name="franchise")
app.add_typer(relations_app, name="relations")
app.add_typer(suggest_app, name="suggest")
app.command("order")(order_cmd)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
