"""Block and cluster hierarchy domain service."""

import logging
from typing import Iterable, Optional

from mahallu.database import collections
from mahallu.database.base import DocumentStore
from mahallu.domain.entities import Block, Cluster
from mahallu.domain.errors import (
    DuplicateError,
    NotFoundError,
    ValidationError,
    block_not_found,
    cluster_not_found,
    duplicate_cluster,
)
from mahallu.domain.mappers import block_to_domain, cluster_to_domain

logger = logging.getLogger(__name__)

DEFAULT_CLUSTERS = ("A", "B", "C", "D")


def same_name(left: str, right: str) -> bool:
    """Compare block or cluster names ignoring case and surrounding space."""
    return left.strip().lower() == right.strip().lower()


class HierarchyService:
    """Service for managing blocks, their clusters, and cascading deletes."""

    def __init__(self, store: DocumentStore):
        """Initialize hierarchy service.

        Args:
            store: Document store instance
        """
        self.store = store

    def list_clusters(self, block_id: Optional[str] = None) -> list[Cluster]:
        """List clusters in creation order, optionally for one block."""
        clusters = [cluster_to_domain(doc) for doc in self.store.get_all(collections.CLUSTERS)]
        if block_id is not None:
            clusters = [c for c in clusters if c.block_id == block_id]
        return clusters

    def list_blocks(self) -> list[Block]:
        """List all blocks with their clusters."""
        clusters = self.list_clusters()
        return [
            block_to_domain(doc, tuple(c for c in clusters if c.block_id == doc["id"]))
            for doc in self.store.get_all(collections.BLOCKS)
        ]

    def find_block(self, name: str) -> Optional[Block]:
        """Find a block by name, ignoring case.

        Returns:
            Block entity or None if not found
        """
        for block in self.list_blocks():
            if same_name(block.name, name):
                return block
        return None

    def get_block(self, name: str) -> Block:
        """Get a block by name.

        Raises:
            NotFoundError: If no block has that name
        """
        block = self.find_block(name)
        if block is None:
            raise NotFoundError(block_not_found(name))
        return block

    def find_cluster(self, block: Block, name: str) -> Optional[Cluster]:
        """Find a cluster of a block by name, ignoring case."""
        for cluster in block.clusters:
            if same_name(cluster.name, name):
                return cluster
        return None

    def get_cluster(self, block_name: str, cluster_name: str) -> tuple[Block, Cluster]:
        """Resolve a block and one of its clusters by name.

        Raises:
            NotFoundError: If the block or the cluster does not exist
        """
        block = self.get_block(block_name)
        cluster = self.find_cluster(block, cluster_name)
        if cluster is None:
            raise NotFoundError(cluster_not_found(block.name, cluster_name))
        return block, cluster

    def create_block(self, name: str) -> Block:
        """Create a block with the default clusters A to D.

        Creating a block whose name already exists (ignoring case) returns
        the existing block unchanged.

        Args:
            name: Block name

        Returns:
            Block entity with its clusters

        Raises:
            ValidationError: If the name is blank
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Block name is required")

        existing = self.find_block(name)
        if existing is not None:
            return existing

        with self.store.batch():
            block_id = self.store.add(collections.BLOCKS, {"name": name})
            clusters = tuple(
                Cluster(
                    id=self.store.add(collections.CLUSTERS, {"name": cluster_name, "blockId": block_id}),
                    block_id=block_id,
                    name=cluster_name,
                )
                for cluster_name in DEFAULT_CLUSTERS
            )

        logger.info("Created block '%s' with clusters %s", name, ", ".join(DEFAULT_CLUSTERS))
        return Block(id=block_id, name=name, clusters=clusters)

    def create_cluster(self, block_name: str, cluster_name: str) -> Cluster:
        """Add a cluster to an existing block.

        Cluster names are stored upper-cased.

        Returns:
            The created Cluster entity

        Raises:
            NotFoundError: If the block does not exist
            DuplicateError: If the block already has a cluster with that name
            ValidationError: If the cluster name is blank
        """
        cluster_name = cluster_name.strip().upper() if cluster_name else ""
        if not cluster_name:
            raise ValidationError("Cluster name is required")

        block = self.get_block(block_name)
        if self.find_cluster(block, cluster_name) is not None:
            raise DuplicateError(duplicate_cluster(block.name, cluster_name))

        cluster_id = self.store.add(collections.CLUSTERS, {"name": cluster_name, "blockId": block.id})
        logger.info("Created cluster '%s' in block '%s'", cluster_name, block.name)
        return Cluster(id=cluster_id, block_id=block.id, name=cluster_name)

    def delete_members(self, member_ids: Iterable[str]) -> int:
        """Delete members together with all of their transactions.

        Returns:
            Number of members deleted
        """
        ids = set(member_ids)
        if not ids:
            return 0

        with self.store.batch():
            for txn in self.store.get_all(collections.TRANSACTIONS):
                if txn.get("memberId") in ids:
                    self.store.delete(collections.TRANSACTIONS, txn["id"])
            for member_id in ids:
                self.store.delete(collections.MEMBERS, member_id)
        return len(ids)

    def _member_ids(self, field: str, value: str) -> list[str]:
        return [doc["id"] for doc in self.store.get_all(collections.MEMBERS) if doc.get(field) == value]

    def delete_block(self, block_name: str) -> None:
        """Delete a block, its clusters, their members and their transactions.

        Raises:
            NotFoundError: If the block does not exist
        """
        block = self.get_block(block_name)

        with self.store.batch():
            removed = self.delete_members(self._member_ids("blockId", block.id))
            for cluster in self.list_clusters(block.id):
                self.store.delete(collections.CLUSTERS, cluster.id)
            self.store.delete(collections.BLOCKS, block.id)

        logger.info("Deleted block '%s' and %d member(s)", block.name, removed)

    def delete_cluster(self, block_name: str, cluster_name: str) -> None:
        """Delete a cluster, its members and their transactions.

        Raises:
            NotFoundError: If the block or the cluster does not exist
        """
        block, cluster = self.get_cluster(block_name, cluster_name)

        with self.store.batch():
            removed = self.delete_members(self._member_ids("clusterId", cluster.id))
            self.store.delete(collections.CLUSTERS, cluster.id)

        logger.info("Deleted cluster '%s' of block '%s' and %d member(s)", cluster.name, block.name, removed)
