# -*- coding: utf-8 -*-
"""No-op implementations, wired by the container when ingestion runs in dry-run mode."""

from propagation_watcher.persistence.repositories.noop.repositories import (
    NoOpBlockFetchRepository,
    NoOpPeerRepository,
    NoOpSeenTxCache,
    NoOpSightingRepository,
    NoOpTxDetailRepository,
)

__all__ = [
    "NoOpBlockFetchRepository",
    "NoOpPeerRepository",
    "NoOpSeenTxCache",
    "NoOpSightingRepository",
    "NoOpTxDetailRepository",
]
