# -*- coding: utf-8 -*-
"""In-memory block-fetch repository (append-only list)."""

from __future__ import annotations

from propagation_watcher.models.block import BlockFetchRecord
from propagation_watcher.persistence.repositories.interfaces.block_fetch_repository import (
    IBlockFetchRepository,
)


class InMemoryBlockFetchRepository(IBlockFetchRepository):
    """In-memory implementation of IBlockFetchRepository."""

    def __init__(self) -> None:
        self._records: list[BlockFetchRecord] = []

    async def insert(self, record: BlockFetchRecord) -> None:
        self._records.append(record)

    def list_all(self) -> list[BlockFetchRecord]:
        return list(self._records)

    def list_by_block(self, block_hash: str) -> list[BlockFetchRecord]:
        return [r for r in self._records if r.block_hash == block_hash]
