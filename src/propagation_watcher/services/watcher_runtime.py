"""WatcherRuntime: starts and stops storage, the writer task and the trusted peers poller."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from propagation_watcher.clients.http import AsyncHttpClient
    from propagation_watcher.config import Settings
    from propagation_watcher.consumers import PersistJobConsumer
    from propagation_watcher.persistence.postgres import PostgresDatabase
    from propagation_watcher.services.ingestion import IngestionService
    from propagation_watcher.services.trusted_peers import TrustedPeersTracker


class WatcherRuntime:
    """Lifecycle of the running watcher.

    start(): open storage (skipped in dry-run), start the writer, start the
    trusted peers poller. stop(): reverse order, draining the writer queue
    with a timeout first.
    """

    def __init__(
        self,
        settings: Settings,
        ingestion_service: IngestionService,
        *,
        database: PostgresDatabase | None = None,
        consumer: PersistJobConsumer | None = None,
        trusted_peers_tracker: TrustedPeersTracker | None = None,
        http_client: AsyncHttpClient | None = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._settings = settings
        self._ingestion = ingestion_service
        self._database = database
        self._consumer = consumer
        self._trusted_peers = trusted_peers_tracker
        self._http = http_client
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._started = False

    @property
    def ingestion(self) -> IngestionService:
        return self._ingestion

    @property
    def trusted_peers(self) -> TrustedPeersTracker | None:
        return self._trusted_peers

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Bring every component up. Idempotent.

        Raises:
            StorageUnavailableError: Storage cannot be opened (not raised in dry-run).
        """
        if self._started:
            return
        ing = self._settings.ingestion
        if not ing.dry_run and self._database is not None:
            await self._database.open()
        if self._consumer is not None:
            await self._consumer.start()
        if self._trusted_peers is not None and self._settings.trusted_peers.enabled:
            await self._trusted_peers.start()
        self._started = True
        self._logger.info(
            "watcher_started",
            dry_run=ing.dry_run,
            async_writer=self._ingestion.uses_writer_queue,
            overflow_policy=ing.overflow_policy,
            trusted_peers_enabled=self._settings.trusted_peers.enabled,
        )

    async def stop(self, drain_timeout: float | None = None) -> int:
        """Shut everything down; returns the number of writer jobs abandoned. Idempotent."""
        if not self._started:
            return 0
        self._started = False
        if self._trusted_peers is not None:
            await self._trusted_peers.stop()
        abandoned = await self._ingestion.stop(drain_timeout)
        if self._consumer is not None:
            await self._consumer.stop()
        if self._http is not None:
            await self._http.aclose()
        if self._database is not None:
            await self._database.close()
        self._logger.info("watcher_stopped", abandoned_count=abandoned)
        return abandoned
