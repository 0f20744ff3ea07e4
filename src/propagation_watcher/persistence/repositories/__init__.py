# -*- coding: utf-8 -*-
"""Repositories: interfaces (abstractions) and implementations (in_memory, noop)."""

from propagation_watcher.persistence.repositories.interfaces import (
    IBlockFetchRepository,
    IPeerRepository,
    ISeenTxCache,
    ISightingRepository,
    ITxDetailRepository,
)
from propagation_watcher.persistence.repositories.in_memory import (
    InMemoryBlockFetchRepository,
    InMemoryPeerRepository,
    InMemorySeenTxCache,
    InMemorySightingRepository,
    InMemoryTxDetailRepository,
)
from propagation_watcher.persistence.repositories.noop import (
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
