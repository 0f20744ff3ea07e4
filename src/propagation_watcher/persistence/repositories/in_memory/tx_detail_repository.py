# -*- coding: utf-8 -*-
"""In-memory transaction detail repository (keyed by tx_hash)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from propagation_watcher.models.tx_detail import TxDetail
from propagation_watcher.persistence.repositories.interfaces.tx_detail_repository import (
    ITxDetailRepository,
)


class InMemoryTxDetailRepository(ITxDetailRepository):
    """In-memory implementation of ITxDetailRepository. First write per hash wins."""

    def __init__(self) -> None:
        self._store: dict[str, TxDetail] = {}

    async def insert_batch(self, details: Sequence[TxDetail]) -> int:
        inserted = 0
        for d in details:
            if d.tx_hash not in self._store:
                self._store[d.tx_hash] = d
                inserted += 1
        return inserted

    def get(self, tx_hash: str) -> Optional[TxDetail]:
        return self._store.get(tx_hash)

    def list_all(self) -> list[TxDetail]:
        return list(self._store.values())
