# -*- coding: utf-8 -*-
"""Repositories and cache that accept everything and store nothing."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from propagation_watcher.models.block import BlockFetchRecord
from propagation_watcher.models.sighting import Sighting
from propagation_watcher.models.tx_detail import TxDetail
from propagation_watcher.persistence.repositories.interfaces import (
    IBlockFetchRepository,
    IPeerRepository,
    ISeenTxCache,
    ISightingRepository,
    ITxDetailRepository,
)


class NoOpSeenTxCache(ISeenTxCache):
    """Never remembers anything: every hash is unseen and every claim is granted."""

    def contains_and_mark_recent(self, tx_hash: str) -> bool:
        return False

    def add(self, tx_hash: str) -> None:
        return None

    def claim(self, tx_hash: str) -> bool:
        return True

    def commit(self, tx_hashes: Iterable[str]) -> None:
        return None

    def release(self, tx_hashes: Iterable[str]) -> None:
        return None

    def __len__(self) -> int:
        return 0


class NoOpPeerRepository(IPeerRepository):
    async def register(self, peer_id: str) -> None:
        return None


class NoOpSightingRepository(ISightingRepository):
    async def insert_batch(self, sightings: Sequence[Sighting]) -> int:
        return 0


class NoOpTxDetailRepository(ITxDetailRepository):
    async def insert_batch(self, details: Sequence[TxDetail]) -> int:
        return 0


class NoOpBlockFetchRepository(IBlockFetchRepository):
    async def insert(self, record: BlockFetchRecord) -> None:
        return None
