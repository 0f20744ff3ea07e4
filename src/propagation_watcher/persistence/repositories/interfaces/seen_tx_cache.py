"""Abstract interface for the seen-transaction (dedup) cache."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable


class ISeenTxCache(ABC):
    """Bounded, time-expiring membership set of transaction hashes.

    All methods are synchronous and must be safe to call from several threads
    or tasks at once. claim/commit/release make the check-then-add sequence
    atomic per hash across concurrent batches: only one caller obtains the
    claim, and the hash becomes "seen" once the claimer commits it.
    """

    @abstractmethod
    def contains_and_mark_recent(self, tx_hash: str) -> bool:
        """Return True if tx_hash is present and unexpired; a hit refreshes its recency."""
        ...

    @abstractmethod
    def add(self, tx_hash: str) -> None:
        """Mark tx_hash as seen (insert or refresh)."""
        ...

    @abstractmethod
    def claim(self, tx_hash: str) -> bool:
        """Return True if the caller should extract details for tx_hash.

        False when the hash is already seen or claimed by another in-flight batch.
        """
        ...

    @abstractmethod
    def commit(self, tx_hashes: Iterable[str]) -> None:
        """Mark claimed hashes as seen and drop their claims."""
        ...

    @abstractmethod
    def release(self, tx_hashes: Iterable[str]) -> None:
        """Drop claims without marking the hashes seen."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of seen entries currently held (expired entries may linger until touched)."""
        ...
