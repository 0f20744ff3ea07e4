"""Abstract interface for block-fetch storage (table: block_fetched)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from propagation_watcher.models.block import BlockFetchRecord


class IBlockFetchRepository(ABC):
    """One row per (block, peer) observation. No duplicate suppression."""

    @abstractmethod
    async def insert(self, record: BlockFetchRecord) -> None:
        """Insert exactly one block-fetch row.

        Raises:
            StorageError: If the backend call fails.
        """
        ...
