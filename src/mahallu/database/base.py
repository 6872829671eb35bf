"""Abstract document store interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional

Document = dict[str, Any]
Listener = Callable[[list[Document]], None]


class DocumentStore(ABC):
    """Abstract schema-less document store for the ledger.

    Documents are plain dicts carrying a string ``id`` plus ``createdAt`` and
    ``updatedAt`` ISO-8601 timestamps maintained by the store.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Create whatever backing structures the store needs."""
        pass

    @abstractmethod
    def get_all(self, collection: str) -> list[Document]:
        """Return every document in a collection."""
        pass

    @abstractmethod
    def get_one(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return one document, or None if it does not exist."""
        pass

    @abstractmethod
    def add(self, collection: str, fields: Document) -> str:
        """Insert a document. Returns its ID.

        A caller-supplied ``id`` field is used as the document ID; otherwise
        one is generated. Adding an ID that already exists raises ValueError.
        """
        pass

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Document) -> None:
        """Merge fields into an existing document.

        Missing documents are left alone with a logged warning.
        """
        pass

    @abstractmethod
    def set(self, collection: str, doc_id: str, fields: Document) -> None:
        """Replace or insert a document under a known ID."""
        pass

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    def clear(self, collection: str) -> None:
        """Delete every document in a collection."""
        pass

    @abstractmethod
    def subscribe(self, collection: str, callback: Listener) -> Callable[[], None]:
        """Register a change listener for a collection.

        The callback receives the full document list immediately and again
        after every change. Returns a function that removes the listener.
        """
        pass

    @abstractmethod
    def batch(self) -> AbstractContextManager[None]:
        """Group writes so they are committed together.

        Writes issued inside the block are applied atomically when it exits
        cleanly and discarded if it raises. Listeners of each touched
        collection are notified once, after commit.
        """
        pass
