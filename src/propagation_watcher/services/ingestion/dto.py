"""Ingestion DTOs: the persistence job handed to the writer and the per-call result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from propagation_watcher.models.sighting import Sighting
    from propagation_watcher.models.tx_detail import TxDetail
    from propagation_watcher.services.preparation import PreparedBatch

IngestionStatus = Literal[
    "skipped",
    "invalid_peer",
    "empty",
    "persisted",
    "persist_failed",
    "enqueued",
    "rejected",
]


@dataclass(frozen=True, slots=True)
class PersistJob:
    """Everything one peer report needs written: sightings, details and the claims to settle."""

    peer_id: str
    sightings: tuple[Sighting, ...] = ()
    details: tuple[TxDetail, ...] = ()
    claimed_hashes: tuple[str, ...] = ()

    @classmethod
    def from_batch(cls, batch: PreparedBatch) -> PersistJob:
        return cls(
            peer_id=batch.peer_id,
            sightings=tuple(batch.sightings),
            details=tuple(batch.details),
            claimed_hashes=tuple(batch.claimed_hashes),
        )


@dataclass(frozen=True, slots=True)
class PersistOutcome:
    """What BatchPersister managed to store for one job."""

    sightings_stored: bool = False
    details_stored: bool = False

    @property
    def success(self) -> bool:
        return self.sightings_stored and self.details_stored


@dataclass(frozen=True, slots=True)
class IngestionResult:
    """Outcome of IngestionService.handle_transactions."""

    peer_id: str
    status: IngestionStatus
    tx_count: int = 0
    new_tx_count: int = 0
    evicted_jobs: int = 0
    """Older jobs dropped from a full writer queue to make room for this one."""
    outcome: PersistOutcome | None = field(default=None)
    """Set when the job was persisted inline."""
