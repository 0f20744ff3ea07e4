# -*- coding: utf-8 -*-
"""PostgreSQL connection pool and bounded call runner (psycopg2)."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import psycopg2
import structlog
from psycopg2.extensions import QueryCanceledError
from psycopg2.pool import ThreadedConnectionPool

from propagation_watcher.exceptions import (
    StorageError,
    StorageTimeoutError,
    StorageUnavailableError,
)

if TYPE_CHECKING:
    from psycopg2.extensions import cursor as Cursor

    from propagation_watcher.config import Settings

SCHEMA = """
CREATE TABLE IF NOT EXISTS peer (
    peer_id TEXT PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS tx_summary (
    id BIGSERIAL PRIMARY KEY,
    tx_hash TEXT NOT NULL,
    peer_id TEXT NOT NULL REFERENCES peer (peer_id),
    tx_first_seen BIGINT NOT NULL,
    time BIGINT NOT NULL,
    CONSTRAINT tx_summary_hash_peer_seen_key UNIQUE (tx_hash, peer_id, tx_first_seen)
);

CREATE TABLE IF NOT EXISTS tx_detail (
    tx_hash TEXT PRIMARY KEY,
    tx_fee TEXT NOT NULL,
    gas_fee_cap TEXT NOT NULL,
    gas_tip_cap TEXT NOT NULL,
    tx_first_seen BIGINT NOT NULL,
    receiver TEXT NOT NULL,
    signer TEXT NOT NULL,
    nonce TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS block_fetched (
    id BIGSERIAL PRIMARY KEY,
    block_hash TEXT NOT NULL,
    block_number BIGINT NOT NULL,
    first_seen_ts BIGINT NOT NULL,
    peer TEXT NOT NULL REFERENCES peer (peer_id),
    peer_remote_addr TEXT,
    peer_local_addr TEXT
);

CREATE INDEX IF NOT EXISTS idx_tx_summary_tx_hash ON tx_summary (tx_hash);
CREATE INDEX IF NOT EXISTS idx_tx_summary_first_seen ON tx_summary (tx_first_seen);
CREATE INDEX IF NOT EXISTS idx_block_fetched_block_hash ON block_fetched (block_hash);
"""


class PostgresDatabase:
    """Owns a psycopg2 ThreadedConnectionPool and runs cursor callbacks off the event loop.

    Every run() borrows its own connection and transaction (commit on success,
    rollback on error), is bounded by call_timeout_seconds on the caller side and
    by statement_timeout on the server side, and maps driver errors to StorageError.
    A semaphore sized to max_connections keeps callers from exhausting the pool;
    a slot is only given back once its worker thread has returned.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize without connecting; call open() before use.

        Args:
            settings: Application settings (uses settings.storage).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._storage = settings.storage
        self._pool: Optional[ThreadedConnectionPool] = None
        self._slots = asyncio.Semaphore(self._storage.max_connections)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def is_open(self) -> bool:
        return self._pool is not None and not self._pool.closed

    async def open(self) -> None:
        """Create the pool (and the schema if configured). Idempotent.

        Raises:
            StorageUnavailableError: If no connection can be established.
        """
        if self.is_open:
            return
        st = self._storage
        self._logger.info(
            "storage_opening",
            storage_host=st.host,
            storage_port=st.port,
            storage_database=st.database,
        )
        try:
            self._pool = await asyncio.to_thread(self._create_pool)
        except psycopg2.Error as e:
            self._logger.error(
                "storage_open_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise StorageUnavailableError(
                f"cannot connect to postgres at {st.host}:{st.port}/{st.database}",
                operation="open",
                cause=e,
            ) from e
        if st.create_schema:
            await self.run(lambda cur: cur.execute(SCHEMA), operation="create_schema")
        self._logger.info("storage_opened", storage_max_connections=st.max_connections)

    async def close(self) -> None:
        """Close every pooled connection. Idempotent."""
        pool = self._pool
        self._pool = None
        if pool is not None and not pool.closed:
            await asyncio.to_thread(pool.closeall)
            self._logger.info("storage_closed")

    async def run[R](self, fn: Callable[[Cursor], R], *, operation: str) -> R:
        """Run fn(cursor) in one transaction on a worker thread.

        When call_timeout_seconds passes, the running statement is cancelled
        and the worker gets one more timeout period to settle. If it committed
        in the meantime its result is returned. Only when the worker is still
        busy after that grace is the outcome unknown; the pool slot stays taken
        until the worker returns.

        Raises:
            StorageTimeoutError: The call timed out and was rolled back, or its
                outcome is unknown (see message).
            StorageError: On any driver error, or if the database is not open.
        """
        pool = self._pool
        if pool is None or pool.closed:
            raise StorageError("database is not open", operation=operation)
        timeout = self._storage.call_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                await self._slots.acquire()
        except TimeoutError as e:
            raise StorageTimeoutError(
                f"{operation} waited {timeout}s for a free connection",
                operation=operation,
                cause=e,
            ) from e

        call = _InFlightCall()
        worker = asyncio.ensure_future(asyncio.to_thread(self._run_in_thread, pool, fn, call))
        worker.add_done_callback(lambda _: self._slots.release())

        try:
            done, _ = await asyncio.wait({worker}, timeout=timeout)
            if not done:
                call.cancel()
                done, _ = await asyncio.wait({worker}, timeout=timeout)
        except asyncio.CancelledError:
            call.cancel()
            worker.add_done_callback(_consume_late_error)
            raise
        if not done:
            worker.add_done_callback(_consume_late_error)
            self._logger.error("storage_call_outcome_unknown", operation=operation)
            raise StorageTimeoutError(
                f"{operation} exceeded {timeout}s; outcome unknown",
                operation=operation,
                outcome_unknown=True,
            )

        try:
            return worker.result()
        except QueryCanceledError as e:
            raise StorageTimeoutError(
                f"{operation} cancelled after {timeout}s and rolled back",
                operation=operation,
                cause=e,
            ) from e
        except psycopg2.Error as e:
            raise StorageError(
                f"{operation} failed: {type(e).__name__}: {e}".strip(),
                operation=operation,
                cause=e,
            ) from e

    def _create_pool(self) -> ThreadedConnectionPool:
        st = self._storage
        options = (
            f"-c statement_timeout={st.statement_timeout_ms}"
            if st.statement_timeout_ms > 0
            else None
        )
        return ThreadedConnectionPool(
            st.min_connections,
            max(st.min_connections, st.max_connections),
            host=st.host,
            port=st.port,
            user=st.user,
            password=st.password,
            dbname=st.database,
            connect_timeout=st.connect_timeout_seconds,
            options=options,
        )

    @staticmethod
    def _run_in_thread[R](
        pool: ThreadedConnectionPool,
        fn: Callable[[Cursor], R],
        call: _InFlightCall,
    ) -> R:
        conn = pool.getconn()
        broken = False
        try:
            if not call.attach(conn):
                raise QueryCanceledError("cancelled before the statement started")
            # `with conn` commits on success and rolls back on exception
            with conn:
                with conn.cursor() as cur:
                    return fn(cur)
        except (psycopg2.OperationalError, psycopg2.InterfaceError) as e:
            broken = not isinstance(e, QueryCanceledError)
            raise
        finally:
            call.detach()
            pool.putconn(conn, close=broken or bool(conn.closed))


class _InFlightCall:
    """Connection currently used by one run() call, so the loop side can cancel it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._conn: Any = None
        self._cancelled = False

    def attach(self, conn: Any) -> bool:
        """Bind conn; False if the call was already cancelled."""
        with self._lock:
            if self._cancelled:
                return False
            self._conn = conn
            return True

    def detach(self) -> None:
        with self._lock:
            self._conn = None

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            if self._conn is not None:
                # psycopg2 allows cancel() from another thread
                self._conn.cancel()


def _consume_late_error(worker: asyncio.Future[Any]) -> None:
    if not worker.cancelled():
        worker.exception()
