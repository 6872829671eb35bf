"""Store factory functions for creating document store instances."""

import os
from pathlib import Path
from typing import Optional

from mahallu.database.sqlalchemy_store import SQLAlchemyDocumentStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyDocumentStore:
    """Create a SQLite-backed document store.

    Args:
        database_path: Path to SQLite database file. If None, checks MAHALLU_DB_PATH
            environment variable, then defaults to ~/.mahallu/mahallu.db

    Returns:
        SQLAlchemyDocumentStore instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("MAHALLU_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".mahallu"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "mahallu.db")

    return SQLAlchemyDocumentStore(f"sqlite:///{database_path}")
