"""Document store layer for the Mahallu bank ledger."""

from mahallu.database.base import DocumentStore
from mahallu.database.factories import create_sqlite_store

__all__ = ["DocumentStore", "create_sqlite_store"]
