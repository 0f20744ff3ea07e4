"""Persistence layer (dedup cache, repositories, storage backends)."""

from propagation_watcher.persistence.repositories import (
    IBlockFetchRepository,
    IPeerRepository,
    ISeenTxCache,
    ISightingRepository,
    ITxDetailRepository,
    InMemoryBlockFetchRepository,
    InMemoryPeerRepository,
    InMemorySeenTxCache,
    InMemorySightingRepository,
    InMemoryTxDetailRepository,
    NoOpBlockFetchRepository,
    NoOpPeerRepository,
    NoOpSeenTxCache,
    NoOpSightingRepository,
    NoOpTxDetailRepository,
)

__all__ = [
    "IBlockFetchRepository",
    "IPeerRepository",
    "ISeenTxCache",
    "ISightingRepository",
    "ITxDetailRepository",
    "InMemoryBlockFetchRepository",
    "InMemoryPeerRepository",
    "InMemorySeenTxCache",
    "InMemorySightingRepository",
    "InMemoryTxDetailRepository",
    "NoOpBlockFetchRepository",
    "NoOpPeerRepository",
    "NoOpSeenTxCache",
    "NoOpSightingRepository",
    "NoOpTxDetailRepository",
]
