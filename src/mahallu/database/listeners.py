"""Per-collection change listeners."""

import logging
from collections import defaultdict
from typing import Callable

from mahallu.database.base import Document, Listener

logger = logging.getLogger(__name__)


class ListenerRegistry:
    """Keeps change listeners and delivers snapshots to them.

    Notifications raised while a batch is open are held back and delivered
    once per collection by ``flush``.
    """

    def __init__(self, loader: Callable[[str], list[Document]]):
        """Initialize the registry.

        Args:
            loader: Function returning the current documents of a collection
        """
        self._loader = loader
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._pending: set[str] = set()

    def add(self, collection: str, callback: Listener) -> Callable[[], None]:
        """Register a listener, send it the initial snapshot, return unsubscribe."""
        self._listeners[collection].append(callback)
        self._deliver(callback, self._loader(collection))

        def unsubscribe() -> None:
            if callback in self._listeners[collection]:
                self._listeners[collection].remove(callback)

        return unsubscribe

    def mark(self, collection: str) -> None:
        """Remember that a collection changed inside an open batch."""
        self._pending.add(collection)

    def flush(self) -> None:
        """Notify every collection marked since the last flush."""
        pending, self._pending = self._pending, set()
        for collection in sorted(pending):
            self.notify(collection)

    def discard_pending(self) -> None:
        """Forget marked collections after a rolled back batch."""
        self._pending.clear()

    def notify(self, collection: str) -> None:
        """Send the current snapshot of a collection to its listeners."""
        callbacks = list(self._listeners.get(collection, ()))
        if not callbacks:
            return
        documents = self._loader(collection)
        for callback in callbacks:
            self._deliver(callback, documents)

    def _deliver(self, callback: Listener, documents: list[Document]) -> None:
        try:
            callback([dict(doc) for doc in documents])
        except Exception:
            logger.exception("Listener %r failed", callback)
