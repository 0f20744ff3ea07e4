# -*- coding: utf-8 -*-
"""In-memory sighting repository (keyed by (tx_hash, peer_id, first_seen_ms))."""

from __future__ import annotations

from collections.abc import Sequence

from propagation_watcher.models.sighting import Sighting
from propagation_watcher.persistence.repositories.interfaces.sighting_repository import (
    ISightingRepository,
)


class InMemorySightingRepository(ISightingRepository):
    """In-memory implementation of ISightingRepository. Insertion order is preserved."""

    def __init__(self) -> None:
        self._store: dict[tuple[str, str, int], Sighting] = {}

    async def insert_batch(self, sightings: Sequence[Sighting]) -> int:
        inserted = 0
        for s in sightings:
            k = s.key()
            if k not in self._store:
                self._store[k] = s
                inserted += 1
        return inserted

    def list_all(self) -> list[Sighting]:
        return list(self._store.values())

    def list_by_peer(self, peer_id: str) -> list[Sighting]:
        return [s for s in self._store.values() if s.peer_id == peer_id]

    def list_by_hash(self, tx_hash: str) -> list[Sighting]:
        return [s for s in self._store.values() if s.tx_hash == tx_hash]
