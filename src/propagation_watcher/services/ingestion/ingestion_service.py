"""IngestionService: the entry points the node's peer dispatcher calls.

handle_transactions prepares a batch synchronously (dedup and extraction) and
hands persistence either to the bounded writer queue or runs it inline.
handle_block_fetched always records inline so its failures reach the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bound_contextvars

from propagation_watcher.exceptions import QueueEmpty, QueueFull, QueueShutdown
from propagation_watcher.queue import IAsyncQueue, QueueMessage
from propagation_watcher.services.ingestion.dto import IngestionResult, PersistJob
from propagation_watcher.utils.validation import is_peer_id, mask_peer_id

if TYPE_CHECKING:
    from propagation_watcher.config import OverflowPolicyName
    from propagation_watcher.models.block import BlockFetchRecord, FetchedBlock
    from propagation_watcher.models.transaction import ObservedTransaction
    from propagation_watcher.persistence.repositories.interfaces import ISeenTxCache
    from propagation_watcher.services.ingestion.batch_persister import BatchPersister
    from propagation_watcher.services.preparation import TransactionPreparer
    from propagation_watcher.services.recording import BlockFetchRecorder

PersistQueue = IAsyncQueue[QueueMessage[PersistJob]]


class IngestionService:
    """Receives transaction batches and block fetches from peers."""

    def __init__(
        self,
        preparer: TransactionPreparer,
        batch_persister: BatchPersister,
        block_recorder: BlockFetchRecorder,
        seen_cache: ISeenTxCache,
        *,
        queue: PersistQueue | None = None,
        overflow_policy: OverflowPolicyName = "drop_oldest",
        drain_timeout_seconds: float = 10.0,
        dry_run: bool = False,
        mark_seen_on_extract: bool = False,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            preparer: Builds sightings and details from a peer's transactions.
            batch_persister: Writes a PersistJob.
            block_recorder: Records block fetches inline.
            seen_cache: Dedup cache; claims of dropped jobs are released here.
            queue: Writer queue. None persists every batch inline.
            overflow_policy: 'drop_oldest' evicts the oldest queued job when the
                queue is full; 'reject' refuses the new one.
            drain_timeout_seconds: Default wait for queued jobs on stop().
            dry_run: Accept every call and touch neither cache nor storage.
            mark_seen_on_extract: Commit hashes to the cache at extraction time.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._preparer = preparer
        self._persister = batch_persister
        self._block_recorder = block_recorder
        self._cache = seen_cache
        self._queue = queue
        self._overflow_policy = overflow_policy
        self._drain_timeout = drain_timeout_seconds
        self._dry_run = dry_run
        self._mark_seen = mark_seen_on_extract
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    @property
    def uses_writer_queue(self) -> bool:
        return self._queue is not None

    async def handle_transactions(
        self,
        txs: Sequence[ObservedTransaction],
        peer_id: str,
    ) -> IngestionResult:
        """Record a batch of transactions delivered by peer_id."""
        if self._dry_run:
            return IngestionResult(peer_id=peer_id, status="skipped", tx_count=len(txs))
        if not is_peer_id(peer_id):
            self._logger.warning(
                "ingestion_invalid_peer_id",
                peer_id=mask_peer_id(peer_id),
                tx_count=len(txs),
            )
            return IngestionResult(peer_id=peer_id, status="invalid_peer", tx_count=len(txs))
        if not txs:
            return IngestionResult(peer_id=peer_id, status="empty")

        peer_id = peer_id.strip()
        batch = self._preparer.prepare(txs, peer_id, mark_seen=self._mark_seen)
        job = PersistJob.from_batch(batch)

        queue = self._queue
        if queue is None:
            outcome = await self._persister.persist(job)
            return IngestionResult(
                peer_id=peer_id,
                status="persisted" if outcome.success else "persist_failed",
                tx_count=len(job.sightings),
                new_tx_count=len(job.details),
                outcome=outcome,
            )
        return self._enqueue(queue, job)

    async def handle_block_fetched(
        self,
        block: FetchedBlock,
        peer_id: str,
        peer_remote_addr: str,
        peer_local_addr: str,
    ) -> BlockFetchRecord | None:
        """Record that peer_id delivered block. Recorder errors propagate.

        Raises:
            ValueError: peer_id is not a usable peer id.
            PeerRegistrationError: Peer registration failed (block policy 'raise').
            SinglePersistError: The block-fetch insert failed (block policy 'raise').
        """
        if self._dry_run:
            return None
        if not is_peer_id(peer_id):
            raise ValueError(f"invalid peer id: {peer_id!r}")
        return await self._block_recorder.record(
            block,
            peer_id.strip(),
            peer_remote_addr,
            peer_local_addr,
        )

    async def stop(self, drain_timeout: float | None = None) -> int:
        """Stop accepting jobs and wait for queued ones to be written.

        Jobs still queued when drain_timeout (seconds) elapses are abandoned
        and their claims released.

        Returns:
            Number of abandoned jobs.
        """
        if self._queue is None:
            return 0
        timeout = self._drain_timeout if drain_timeout is None else drain_timeout
        self._queue.shutdown()
        pending = self._queue.qsize()
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            abandoned = self._abandon_pending(self._queue)
            self._logger.warning(
                "ingestion_drain_timeout",
                drain_timeout_seconds=timeout,
                abandoned_count=abandoned,
            )
            return abandoned
        self._logger.info("ingestion_drained", drained_count=pending)
        return 0

    def _enqueue(self, queue: PersistQueue, job: PersistJob) -> IngestionResult:
        message = QueueMessage.create(job, metadata={"peer_id": job.peer_id})
        evicted: QueueMessage[PersistJob] | None = None
        try:
            if self._overflow_policy == "drop_oldest":
                evicted = queue.put_evicting(message)
            else:
                queue.put_nowait(message)
        except (QueueFull, QueueShutdown) as e:
            self._cache.release(job.claimed_hashes)
            self._logger.warning(
                "persist_job_rejected",
                peer_id=mask_peer_id(job.peer_id),
                reason="queue_shutdown" if isinstance(e, QueueShutdown) else "queue_full",
                sighting_count=len(job.sightings),
                detail_count=len(job.details),
                queue_size=queue.qsize(),
            )
            return IngestionResult(
                peer_id=job.peer_id,
                status="rejected",
                tx_count=len(job.sightings),
                new_tx_count=len(job.details),
            )

        if evicted is not None:
            dropped = evicted.payload
            self._cache.release(dropped.claimed_hashes)
            with bound_contextvars(peer_id=mask_peer_id(dropped.peer_id)):
                self._logger.warning(
                    "persist_job_dropped_oldest",
                    sighting_count=len(dropped.sightings),
                    detail_count=len(dropped.details),
                    queue_lag_seconds=round(evicted.age_seconds(), 3),
                )

        return IngestionResult(
            peer_id=job.peer_id,
            status="enqueued",
            tx_count=len(job.sightings),
            new_tx_count=len(job.details),
            evicted_jobs=0 if evicted is None else 1,
        )

    def _abandon_pending(self, queue: PersistQueue) -> int:
        abandoned = 0
        while True:
            try:
                message = queue.get_nowait()
            except (QueueEmpty, QueueShutdown):
                break
            self._cache.release(message.payload.claimed_hashes)
            queue.task_done()
            abandoned += 1
        return abandoned
