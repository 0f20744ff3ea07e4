# -*- coding: utf-8 -*-
"""Ingestion: entry points for peer-delivered transactions and blocks."""

from propagation_watcher.services.ingestion.batch_persister import BatchPersister
from propagation_watcher.services.ingestion.dto import (
    IngestionResult,
    IngestionStatus,
    PersistJob,
    PersistOutcome,
)
from propagation_watcher.services.ingestion.ingestion_service import (
    IngestionService,
    PersistQueue,
)

__all__ = [
    "BatchPersister",
    "IngestionResult",
    "IngestionService",
    "IngestionStatus",
    "PersistJob",
    "PersistOutcome",
    "PersistQueue",
]
