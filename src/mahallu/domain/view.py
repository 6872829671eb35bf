"""Live view of the ledger kept current through store subscriptions."""

import logging
from collections import defaultdict
from typing import Callable

from mahallu.database import collections
from mahallu.database.base import Document, DocumentStore
from mahallu.domain.entities import Block, BlockNode, ClusterNode, MemberAccount, Transaction
from mahallu.domain.ledger import sort_newest_first
from mahallu.domain.mappers import (
    block_to_domain,
    cluster_to_domain,
    member_to_domain,
    transaction_to_domain,
)

logger = logging.getLogger(__name__)

ViewListener = Callable[["LedgerView"], None]

WATCHED_COLLECTIONS = (
    collections.BLOCKS,
    collections.CLUSTERS,
    collections.MEMBERS,
    collections.TRANSACTIONS,
)


class LedgerView:
    """Derived members and block tree, rebuilt on every store change.

    Listeners registered with ``on_change`` are called with the view after
    each rebuild. Call ``close`` to stop following the store.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self.members: list[MemberAccount] = []
        self.blocks: list[BlockNode] = []
        self._documents: dict[str, list[Document]] = {name: [] for name in WATCHED_COLLECTIONS}
        self._listeners: list[ViewListener] = []
        self._ready = False
        self._unsubscribers = [
            store.subscribe(name, lambda docs, name=name: self._on_snapshot(name, docs))
            for name in WATCHED_COLLECTIONS
        ]
        self._ready = True
        self._rebuild()

    def on_change(self, listener: ViewListener) -> Callable[[], None]:
        """Register a listener for rebuilds. Returns a function removing it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def close(self) -> None:
        """Unsubscribe from the store."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._listeners = []

    def _on_snapshot(self, collection: str, documents: list[Document]) -> None:
        self._documents[collection] = documents
        if self._ready:
            self._rebuild()

    def _rebuild(self) -> None:
        by_member: dict[str, list[Transaction]] = defaultdict(list)
        for doc in self._documents[collections.TRANSACTIONS]:
            txn = transaction_to_domain(doc)
            by_member[txn.member_id].append(txn)

        self.members = [
            MemberAccount(member=member, transactions=tuple(sort_newest_first(by_member.get(member.id, []))))
            for member in map(member_to_domain, self._documents[collections.MEMBERS])
        ]

        clusters = [cluster_to_domain(doc) for doc in self._documents[collections.CLUSTERS]]
        nodes = []
        for doc in self._documents[collections.BLOCKS]:
            block: Block = block_to_domain(doc, tuple(c for c in clusters if c.block_id == doc["id"]))
            cluster_nodes = tuple(
                ClusterNode(
                    cluster=cluster,
                    members=tuple(a for a in self.members if a.member.cluster_id == cluster.id),
                )
                for cluster in sorted(block.clusters, key=lambda c: c.name)
            )
            nodes.append(BlockNode(block=block, clusters=cluster_nodes))
        self.blocks = nodes

        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Ledger view listener %r failed", listener)
