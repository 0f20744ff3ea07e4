"""Abstract interface for peer registration."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IPeerRepository(ABC):
    """Registry of reporting peers (table: peer)."""

    @abstractmethod
    async def register(self, peer_id: str) -> None:
        """Insert peer_id if absent. Idempotent.

        Raises:
            StorageError: If the backend call fails.
        """
        ...
