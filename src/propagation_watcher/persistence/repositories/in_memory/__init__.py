# -*- coding: utf-8 -*-
"""In-memory repository implementations (tests, local runs)."""

from propagation_watcher.persistence.repositories.in_memory.block_fetch_repository import (
    InMemoryBlockFetchRepository,
)
from propagation_watcher.persistence.repositories.in_memory.peer_repository import (
    InMemoryPeerRepository,
)
from propagation_watcher.persistence.repositories.in_memory.seen_tx_cache import (
    InMemorySeenTxCache,
)
from propagation_watcher.persistence.repositories.in_memory.sighting_repository import (
    InMemorySightingRepository,
)
from propagation_watcher.persistence.repositories.in_memory.tx_detail_repository import (
    InMemoryTxDetailRepository,
)

__all__ = [
    "InMemoryBlockFetchRepository",
    "InMemoryPeerRepository",
    "InMemorySeenTxCache",
    "InMemorySightingRepository",
    "InMemoryTxDetailRepository",
]
