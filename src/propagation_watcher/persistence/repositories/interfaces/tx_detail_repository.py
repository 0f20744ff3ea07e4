"""Abstract interface for transaction detail storage (table: tx_detail)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from propagation_watcher.models.tx_detail import TxDetail


class ITxDetailRepository(ABC):
    """Stores at most one TxDetail per tx_hash."""

    @abstractmethod
    async def insert_batch(self, details: Sequence[TxDetail]) -> int:
        """Insert details; rows whose tx_hash already exists are skipped.

        Returns:
            Number of rows actually inserted.

        Raises:
            StorageError: If the backend call fails (nothing is inserted).
        """
        ...
