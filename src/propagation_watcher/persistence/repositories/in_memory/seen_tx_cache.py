# -*- coding: utf-8 -*-
"""In-memory seen-transaction cache (cachetools.TTLCache + claim set)."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable

from cachetools import TTLCache

from propagation_watcher.persistence.repositories.interfaces.seen_tx_cache import (
    ISeenTxCache,
)

DEFAULT_MAX_ENTRIES = 1_000_000
DEFAULT_TTL_SECONDS = 24 * 60 * 60.0


class InMemorySeenTxCache(ISeenTxCache):
    """ISeenTxCache on a TTLCache: entries expire by age; when full, expired
    entries go first, then the least recently used one.

    A single lock serializes every operation, so claim() is atomic across
    threads as well as coroutines. Nothing survives a restart.
    """

    def __init__(
        self,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Capacity bound (LRU eviction beyond it).
            ttl_seconds: Time-to-live of each entry, independent of access.
            timer: Monotonic clock in seconds (injectable for tests).
        """
        self._seen: TTLCache[str, bool] = TTLCache(
            maxsize=max(1, max_entries),
            ttl=ttl_seconds,
            timer=timer,
        )
        self._claimed: set[str] = set()
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return int(self._seen.maxsize)

    @property
    def claimed_count(self) -> int:
        with self._lock:
            return len(self._claimed)

    def contains_and_mark_recent(self, tx_hash: str) -> bool:
        with self._lock:
            return self._lookup(tx_hash)

    def add(self, tx_hash: str) -> None:
        with self._lock:
            self._seen[tx_hash] = True

    def claim(self, tx_hash: str) -> bool:
        with self._lock:
            if tx_hash in self._claimed or self._lookup(tx_hash):
                return False
            self._claimed.add(tx_hash)
            return True

    def commit(self, tx_hashes: Iterable[str]) -> None:
        with self._lock:
            for h in tx_hashes:
                self._claimed.discard(h)
                self._seen[h] = True

    def release(self, tx_hashes: Iterable[str]) -> None:
        with self._lock:
            for h in tx_hashes:
                self._claimed.discard(h)

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def _lookup(self, tx_hash: str) -> bool:
        # get() goes through __getitem__, which moves the entry to the MRU end
        return self._seen.get(tx_hash) is not None
