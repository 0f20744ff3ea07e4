# -*- coding: utf-8 -*-
"""Repository interfaces (abstractions). Implementations live in in_memory/, noop/, postgres/."""

from propagation_watcher.persistence.repositories.interfaces.block_fetch_repository import (
    IBlockFetchRepository,
)
from propagation_watcher.persistence.repositories.interfaces.peer_repository import (
    IPeerRepository,
)
from propagation_watcher.persistence.repositories.interfaces.seen_tx_cache import (
    ISeenTxCache,
)
from propagation_watcher.persistence.repositories.interfaces.sighting_repository import (
    ISightingRepository,
)
from propagation_watcher.persistence.repositories.interfaces.tx_detail_repository import (
    ITxDetailRepository,
)

__all__ = [
    "IBlockFetchRepository",
    "IPeerRepository",
    "ISeenTxCache",
    "ISightingRepository",
    "ITxDetailRepository",
]
