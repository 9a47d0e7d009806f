"""Database layer package.

Public re-exports so callers can write::

    from relgraph.db import atomic, get_connection, init_db
    from relgraph.db import works, relations, franchises
"""

from relgraph.db.connection import atomic, get_connection
from relgraph.db.migrations import init_db
from relgraph.db import franchises, relations, works

__all__ = ["atomic", "get_connection", "init_db", "franchises", "relations", "works"]
