"""Centralised settings for the franchise relation graph.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("RELGRAPH_WORKSPACE", Path.home() / ".relgraph_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "library.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Graph refresh
    # ------------------------------------------------------------------
    staleness_days: int = field(
        default_factory=lambda: int(os.environ.get("RELGRAPH_STALENESS_DAYS", "7"))
    )
    stale_batch_limit: int = field(
        default_factory=lambda: int(os.environ.get("RELGRAPH_STALE_BATCH_LIMIT", "10"))
    )

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------
    recent_completed_window: int = field(
        default_factory=lambda: int(
            os.environ.get("RELGRAPH_RECENT_COMPLETED_WINDOW", "20")
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("RELGRAPH_LOG_LEVEL", "WARNING")
    )

    @property
    def staleness_seconds(self) -> int:
        """Refresh horizon expressed in seconds."""
        return self.staleness_days * 24 * 60 * 60

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this everywhere:
#   from relgraph.config import settings
settings = Settings()
