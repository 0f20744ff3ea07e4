"""Abstract interface for sighting storage (table: tx_summary)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from propagation_watcher.models.sighting import Sighting


class ISightingRepository(ABC):
    """Batched, idempotent storage of sightings keyed by (tx_hash, peer_id, first_seen_ms)."""

    @abstractmethod
    async def insert_batch(self, sightings: Sequence[Sighting]) -> int:
        """Insert all sightings in one call; exact duplicates are silently skipped.

        Returns:
            Number of rows actually inserted.

        Raises:
            StorageError: If the backend call fails (nothing is inserted).
        """
        ...
