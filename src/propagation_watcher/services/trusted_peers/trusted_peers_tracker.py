"""Trusted peers tracker: keeps an in-memory copy of the top-peers list, refreshed by polling."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import structlog

from propagation_watcher.exceptions import UpstreamAPIError

if TYPE_CHECKING:
    from propagation_watcher.clients.trusted_peers_api import TrustedPeersApiClient
    from propagation_watcher.config import Settings


class TrustedPeersTracker:
    """Polls TrustedPeersApiClient every poll_seconds (600 by default).

    A failed fetch keeps the previous list. Readers always get copies, so a
    refresh never mutates a list a caller holds.
    """

    def __init__(
        self,
        settings: Settings,
        api_client: TrustedPeersApiClient,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the tracker.

        Args:
            settings: Application settings (uses settings.trusted_peers).
            api_client: Top-peers client (injected).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
            sleep: Awaitable sleep between polls (injected for tests).
        """
        self._settings = settings
        self._client = api_client
        self._sleep = sleep
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._peers: tuple[str, ...] = ()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def get_trusted_peers(self) -> list[str]:
        return list(self._peers)

    def get_trusted_peers_set(self) -> frozenset[str]:
        return frozenset(self._peers)

    def is_trusted(self, peer_id: str) -> bool:
        return peer_id in self._peers

    async def refresh(self) -> bool:
        """Fetch the list once. Returns False (keeping the old list) on failure."""
        try:
            peers = await self._client.get_top_peers()
        except UpstreamAPIError as e:
            self._logger.warning(
                "trusted_peers_fetch_failed",
                error_type=type(e).__name__,
                error_message=str(e),
                trusted_peer_count=len(self._peers),
            )
            return False
        self._peers = tuple(dict.fromkeys(peers))
        self._logger.info("trusted_peers_refreshed", trusted_peer_count=len(self._peers))
        return True

    async def start(self) -> None:
        """Fetch once, then keep polling in a background task. Idempotent."""
        if self.running:
            return
        if not self._client.base_url:
            self._logger.warning("trusted_peers_base_url_missing", polling_enabled=False)
            return
        await self.refresh()
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _poll_loop(self) -> None:
        poll_seconds = self._settings.trusted_peers.poll_seconds
        try:
            while True:
                await self._sleep(poll_seconds)
                await self.refresh()
        except asyncio.CancelledError:
            self._logger.debug("trusted_peers_polling_stopped")
            raise
