# -*- coding: utf-8 -*-
"""Process entry point: ``propagation-watcher`` or ``python -m propagation_watcher.main``.

The host node's peer dispatcher is handed the IngestionService through
``on_started`` and calls it for every transaction batch and fetched block::

    await run(on_started=lambda ingestion: dispatcher.attach(ingestion))
"""
from __future__ import annotations

import asyncio
import contextlib
import signal
import structlog
from typing import Any, Callable, Optional

from propagation_watcher.DI import Container
from propagation_watcher.config import Settings, get_settings
from propagation_watcher.exceptions import StorageUnavailableError
from propagation_watcher.logging.config import configure_logging
from propagation_watcher.services.ingestion import IngestionService

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _stop_on_signals(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    # add_signal_handler is unavailable on Windows event loops.
    with contextlib.suppress(NotImplementedError):
        for sig in _STOP_SIGNALS:
            loop.add_signal_handler(sig, stop.set)


async def run(
    settings: Optional[Settings] = None,
    *,
    container: Optional[Container] = None,
    on_started: Optional[Callable[[IngestionService], Any]] = None,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    """Start the watcher runtime and block until asked to stop.

    Stops on SIGINT/SIGTERM, when ``shutdown_event`` is set, or when the
    task is cancelled; in every case the writer queue gets a bounded drain.

    Raises:
        StorageUnavailableError: PostgreSQL could not be reached (live mode only).
    """
    settings = settings or get_settings()
    configure_logging(settings)
    logger = structlog.get_logger("main")

    if container is None:
        container = Container()
        container.config.override(settings)
    runtime = container.watcher_runtime()

    try:
        await runtime.start()
    except StorageUnavailableError as e:
        logger.error(
            "main_storage_unavailable",
            storage_host=settings.storage.host,
            storage_database=settings.storage.database,
            error_message=str(e),
        )
        raise

    stop = shutdown_event or asyncio.Event()
    _stop_on_signals(stop)
    if on_started is not None:
        on_started(runtime.ingestion)
    logger.info("main_started", dry_run=settings.ingestion.dry_run)

    try:
        await stop.wait()
    finally:
        abandoned = await runtime.stop(settings.ingestion.drain_timeout_seconds)
        logger.info("main_shutdown_complete", abandoned_count=abandoned)


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
