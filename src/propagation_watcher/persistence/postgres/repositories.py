# -*- coding: utf-8 -*-
"""PostgreSQL repositories. Every value is a bound parameter; nothing is spliced into SQL."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from psycopg2.extras import execute_values

from propagation_watcher.models.block import BlockFetchRecord
from propagation_watcher.models.sighting import Sighting
from propagation_watcher.models.tx_detail import TxDetail
from propagation_watcher.persistence.repositories.interfaces import (
    IBlockFetchRepository,
    IPeerRepository,
    ISightingRepository,
    ITxDetailRepository,
)

if TYPE_CHECKING:
    from psycopg2.extensions import cursor as Cursor

    from propagation_watcher.persistence.postgres.database import PostgresDatabase

SQL_REGISTER_PEER = "INSERT INTO peer (peer_id) VALUES (%s) ON CONFLICT (peer_id) DO NOTHING"

SQL_INSERT_SIGHTINGS = """
INSERT INTO tx_summary (tx_hash, peer_id, tx_first_seen, time)
VALUES %s
ON CONFLICT (tx_hash, peer_id, tx_first_seen) DO NOTHING
"""

SQL_INSERT_DETAILS = """
INSERT INTO tx_detail (
    tx_hash, tx_fee, gas_fee_cap, gas_tip_cap, tx_first_seen, receiver, signer, nonce
)
VALUES %s
ON CONFLICT (tx_hash) DO NOTHING
"""

SQL_INSERT_BLOCK_FETCHED = """
INSERT INTO block_fetched (
    block_hash, block_number, first_seen_ts, peer, peer_remote_addr, peer_local_addr
) VALUES (%s, %s, %s, %s, %s, %s)
"""


def _insert_rows(cur: Cursor, sql: str, rows: list[tuple[Any, ...]]) -> int:
    """Insert all rows in a single statement and return the number actually inserted."""
    # page_size=len(rows) keeps it to one statement, so rowcount covers the whole batch
    execute_values(cur, sql, rows, page_size=max(1, len(rows)))
    return max(0, cur.rowcount)


class PostgresPeerRepository(IPeerRepository):
    """IPeerRepository on table peer."""

    def __init__(self, database: PostgresDatabase) -> None:
        self._db = database

    async def register(self, peer_id: str) -> None:
        await self._db.run(
            lambda cur: cur.execute(SQL_REGISTER_PEER, (peer_id,)),
            operation="register_peer",
        )


class PostgresSightingRepository(ISightingRepository):
    """ISightingRepository on table tx_summary (time mirrors tx_first_seen)."""

    def __init__(self, database: PostgresDatabase) -> None:
        self._db = database

    async def insert_batch(self, sightings: Sequence[Sighting]) -> int:
        if not sightings:
            return 0
        rows = [
            (s.tx_hash, s.peer_id, s.first_seen_ms, s.first_seen_ms) for s in sightings
        ]
        return await self._db.run(
            lambda cur: _insert_rows(cur, SQL_INSERT_SIGHTINGS, rows),
            operation="insert_sightings",
        )


class PostgresTxDetailRepository(ITxDetailRepository):
    """ITxDetailRepository on table tx_detail."""

    def __init__(self, database: PostgresDatabase) -> None:
        self._db = database

    async def insert_batch(self, details: Sequence[TxDetail]) -> int:
        if not details:
            return 0
        rows = [
            (
                d.tx_hash,
                d.fee,
                d.gas_fee_cap,
                d.gas_tip_cap,
                d.first_seen_ms,
                d.receiver,
                d.signer,
                d.nonce,
            )
            for d in details
        ]
        return await self._db.run(
            lambda cur: _insert_rows(cur, SQL_INSERT_DETAILS, rows),
            operation="insert_tx_details",
        )


class PostgresBlockFetchRepository(IBlockFetchRepository):
    """IBlockFetchRepository on table block_fetched."""

    def __init__(self, database: PostgresDatabase) -> None:
        self._db = database

    async def insert(self, record: BlockFetchRecord) -> None:
        params = (
            record.block_hash,
            record.block_number,
            record.first_seen_ms,
            record.peer_id,
            record.peer_remote_addr,
            record.peer_local_addr,
        )
        await self._db.run(
            lambda cur: cur.execute(SQL_INSERT_BLOCK_FETCHED, params),
            operation="insert_block_fetched",
        )
