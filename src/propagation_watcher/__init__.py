"""Propagation watcher: records which peer delivered which transaction or block, and when."""

from propagation_watcher.config import get_settings
from propagation_watcher.DI import Container
from propagation_watcher.models import (
    BlockFetchRecord,
    FetchedBlock,
    ObservedTransaction,
    Sighting,
    TxDetail,
)
from propagation_watcher.services import IngestionService, WatcherRuntime

__version__ = "0.1.0"
__all__ = [
    "BlockFetchRecord",
    "Container",
    "FetchedBlock",
    "IngestionService",
    "ObservedTransaction",
    "Sighting",
    "TxDetail",
    "WatcherRuntime",
    "get_settings",
]
