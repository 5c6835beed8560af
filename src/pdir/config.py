"""Defaults and platform-aware paths for the pdir database."""

from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir

_DB_FILENAME = "pdir.db"
_APP_NAME = "pdir"

# Content longer than this is cut and suffixed with "..." to form the excerpt.
EXCERPT_LENGTH = 150

# Number of recent prompts bundled with the directory boot data.
BOOT_RECENT_LIMIT = 12


def default_db_path() -> Path:
    """Return the platform-appropriate default database path."""
    data_dir = Path(user_data_dir(_APP_NAME))
    return data_dir / _DB_FILENAME
