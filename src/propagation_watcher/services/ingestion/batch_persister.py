"""BatchPersister: writes one PersistJob (sightings, then details)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from propagation_watcher.persistence.repositories.interfaces import ISeenTxCache
from propagation_watcher.services.ingestion.dto import PersistJob, PersistOutcome
from propagation_watcher.services.recording import SightingRecorder, TxDetailRecorder
from propagation_watcher.utils.validation import mask_peer_id


class BatchPersister:
    """Runs the sighting recorder and the detail recorder for a job.

    Sightings are written whether or not the job carries new details. If
    either step raises, the job's claims are released before the error
    propagates so the cache never holds an orphan claim. Releasing a hash
    that was already committed is a no-op.
    """

    def __init__(
        self,
        sighting_recorder: SightingRecorder,
        detail_recorder: TxDetailRecorder,
        seen_cache: ISeenTxCache,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._sightings = sighting_recorder
        self._details = detail_recorder
        self._cache = seen_cache
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def persist(self, job: PersistJob) -> PersistOutcome:
        """Persist sightings then details for job.

        Raises:
            RecorderError: Only when a recorder's policy is 'raise'.
        """
        with bound_contextvars(peer_id=mask_peer_id(job.peer_id)):
            try:
                sightings_stored = await self._sightings.record(job.sightings, job.peer_id)
                details_stored = await self._details.record(job.details, job.claimed_hashes)
            except BaseException:
                self._cache.release(job.claimed_hashes)
                raise

            self._logger.debug(
                "persist_job_done",
                sighting_count=len(job.sightings),
                detail_count=len(job.details),
                sightings_stored=sightings_stored,
                details_stored=details_stored,
            )
            return PersistOutcome(
                sightings_stored=sightings_stored,
                details_stored=details_stored,
            )
