# -*- coding: utf-8 -*-
"""Background writer that drains the persist-job queue into storage.

The loop ends when the queue is shut down and empty, or when the task is
cancelled. A job whose persistence raises is counted as failed and skipped.
"""

from __future__ import annotations

import asyncio
import contextlib
import structlog
from typing import Any, Callable, Optional

from propagation_watcher.exceptions import QueueShutdown, WatcherError
from propagation_watcher.queue import IAsyncQueue, QueueMessage
from propagation_watcher.services.ingestion import BatchPersister, PersistJob
from propagation_watcher.utils.validation import mask_peer_id


class PersistJobConsumer:
    """Single writer feeding queued PersistJobs to a BatchPersister."""

    def __init__(
        self,
        queue: IAsyncQueue[QueueMessage[PersistJob]],
        batch_persister: BatchPersister,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._queue = queue
        self._persister = batch_persister
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._task: Optional[asyncio.Task[None]] = None
        self._processed = 0
        self._failed = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def processed_count(self) -> int:
        return self._processed

    @property
    def failed_count(self) -> int:
        return self._failed

    async def __aenter__(self) -> PersistJobConsumer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Spawn the writer task; no-op while one is alive."""
        if self.running:
            return
        self._task = asyncio.create_task(self._drain(), name="persist-job-writer")

    async def stop(self) -> None:
        """Cancel the writer task (if any) and wait for it to unwind."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _drain(self) -> None:
        self._logger.debug("persist_consumer_started")
        try:
            while True:
                message = await self._queue.get()
                try:
                    await self._process(message)
                finally:
                    self._queue.task_done()
        except QueueShutdown:
            self._logger.info(
                "persist_consumer_stopped",
                reason="queue_shutdown",
                processed_count=self._processed,
                failed_count=self._failed,
            )
        except asyncio.CancelledError:
            self._logger.debug("persist_consumer_cancelled", processed_count=self._processed)
            raise

    async def _process(self, message: QueueMessage[PersistJob]) -> None:
        job = message.payload
        try:
            outcome = await self._persister.persist(job)
        except WatcherError as e:
            self._failed += 1
            self._logger.error(
                "persist_job_failed",
                peer_id=mask_peer_id(job.peer_id),
                message_id=str(message.id),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return
        except Exception as e:
            # Unexpected failure: the writer must outlive any single job.
            self._failed += 1
            self._logger.exception(
                "persist_job_crashed",
                peer_id=mask_peer_id(job.peer_id),
                message_id=str(message.id),
                error_type=type(e).__name__,
            )
            return
        self._processed += 1
        self._logger.debug(
            "persist_job_processed",
            peer_id=mask_peer_id(job.peer_id),
            success=outcome.success,
            queue_lag_seconds=round(message.age_seconds(), 3),
            queue_size=self._queue.qsize(),
        )
