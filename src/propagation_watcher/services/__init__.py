"""Services: preparation, recording, ingestion, trusted peers and runtime lifecycle."""

from propagation_watcher.services.ingestion import (
    BatchPersister,
    IngestionResult,
    IngestionService,
    PersistJob,
)
from propagation_watcher.services.preparation import PreparedBatch, TransactionPreparer
from propagation_watcher.services.recording import (
    BlockFetchRecorder,
    PersistPolicy,
    SightingRecorder,
    TxDetailRecorder,
)
from propagation_watcher.services.trusted_peers import TrustedPeersTracker
from propagation_watcher.services.watcher_runtime import WatcherRuntime

__all__ = [
    "BatchPersister",
    "BlockFetchRecorder",
    "IngestionResult",
    "IngestionService",
    "PersistJob",
    "PersistPolicy",
    "PreparedBatch",
    "SightingRecorder",
    "TransactionPreparer",
    "TrustedPeersTracker",
    "TxDetailRecorder",
    "WatcherRuntime",
]
