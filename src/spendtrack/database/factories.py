"""Locate the spendtrack database and open storage on it."""

import os
from pathlib import Path
from typing import Optional

from spendtrack.database.sqlalchemy_db import SQLAlchemyStorage

DB_PATH_ENV = "SPENDTRACK_DB_PATH"
DATA_DIR_NAME = ".spendtrack"
DB_FILE_NAME = "spendtrack.db"


def default_database_path() -> Path:
    """Return where spendtrack keeps its data when no path is given.

    ``SPENDTRACK_DB_PATH`` wins when set and non-empty; otherwise the file
    lives in ``~/.spendtrack``, which is created on first use.
    """
    configured = os.environ.get(DB_PATH_ENV, "").strip()
    if configured:
        return Path(configured).expanduser()

    data_dir = Path.home() / DATA_DIR_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILE_NAME


def create_sqlite_storage(database_path: Optional[str] = None) -> SQLAlchemyStorage:
    """Open SQLite storage at ``database_path`` or the default location."""
    path = Path(database_path) if database_path else default_database_path()
    return SQLAlchemyStorage(f"sqlite:///{path}")
