# -*- coding: utf-8 -*-
"""Unit tests for SightingRecorder, TxDetailRecorder and BlockFetchRecorder."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from propagation_watcher.exceptions import (
    BatchPersistError,
    PeerRegistrationError,
    SinglePersistError,
    StorageError,
)
from propagation_watcher.models.block import FetchedBlock
from propagation_watcher.models.sighting import Sighting
from propagation_watcher.models.tx_detail import TxDetail
from propagation_watcher.persistence.repositories.in_memory import (
    InMemoryBlockFetchRepository,
    InMemoryPeerRepository,
    InMemorySeenTxCache,
    InMemorySightingRepository,
    InMemoryTxDetailRepository,
)
from propagation_watcher.services.recording import (
    BlockFetchRecorder,
    PersistPolicy,
    SightingRecorder,
    TxDetailRecorder,
)


def _failing_repo(method: str, error: BaseException | None = None) -> Any:
    return cast(Any, SimpleNamespace(**{method: AsyncMock(side_effect=error or StorageError("down"))}))


def _sightings(peer_id: str = "p1") -> list[Sighting]:
    return [Sighting.create("0xa", peer_id, 1), Sighting.create("0xb", peer_id, 2)]


def _detail(tx_hash: str) -> TxDetail:
    return TxDetail(
        tx_hash=tx_hash,
        fee="1",
        gas_fee_cap="1",
        gas_tip_cap="1",
        first_seen_ms=1,
        receiver="0x0",
        signer="0x1111111111111111111111111111111111111111",
        nonce="0",
    )


# ---------------------------------------------------------------------------
# SightingRecorder
# ---------------------------------------------------------------------------


async def test_sighting_recorder_registers_peer_and_stores_batch(
    peer_repo: InMemoryPeerRepository,
    sighting_repo: InMemorySightingRepository,
) -> None:
    recorder = SightingRecorder(peer_repo, sighting_repo)

    ok = await recorder.record(_sightings(), "p1")

    assert ok is True
    assert peer_repo.contains("p1")
    assert len(sighting_repo.list_by_peer("p1")) == 2


async def test_sighting_recorder_is_idempotent(
    peer_repo: InMemoryPeerRepository,
    sighting_repo: InMemorySightingRepository,
) -> None:
    recorder = SightingRecorder(peer_repo, sighting_repo)

    await recorder.record(_sightings(), "p1")
    await recorder.record(_sightings(), "p1")

    assert len(sighting_repo.list_all()) == 2


async def test_sighting_recorder_empty_input_touches_nothing() -> None:
    peers = SimpleNamespace(register=AsyncMock())
    sightings = SimpleNamespace(insert_batch=AsyncMock())
    recorder = SightingRecorder(cast(Any, peers), cast(Any, sightings))

    assert await recorder.record([], "p1") is True
    peers.register.assert_not_called()


async def test_peer_registration_failure_aborts_without_insert(
    sighting_repo: InMemorySightingRepository,
) -> None:
    recorder = SightingRecorder(_failing_repo("register"), sighting_repo)

    ok = await recorder.record(_sightings(), "p1")

    assert ok is False
    assert sighting_repo.list_all() == []


async def test_peer_registration_failure_raises_under_raise_policy(
    sighting_repo: InMemorySightingRepository,
) -> None:
    recorder = SightingRecorder(
        _failing_repo("register"),
        sighting_repo,
        policy=PersistPolicy(on_failure="raise"),
    )

    with pytest.raises(PeerRegistrationError) as exc_info:
        await recorder.record(_sightings(), "p1")

    assert exc_info.value.peer_id == "p1"


async def test_batch_failure_is_dropped_by_default(peer_repo: InMemoryPeerRepository) -> None:
    recorder = SightingRecorder(peer_repo, _failing_repo("insert_batch"))

    assert await recorder.record(_sightings(), "p1") is False


async def test_batch_failure_raises_under_raise_policy(peer_repo: InMemoryPeerRepository) -> None:
    recorder = SightingRecorder(
        peer_repo,
        _failing_repo("insert_batch"),
        policy=PersistPolicy(on_failure="raise"),
    )

    with pytest.raises(BatchPersistError) as exc_info:
        await recorder.record(_sightings(), "p1")

    assert exc_info.value.rows == 2


async def test_batch_is_retried_per_policy(peer_repo: InMemoryPeerRepository) -> None:
    sightings = SimpleNamespace(insert_batch=AsyncMock(side_effect=[StorageError("blip"), 2]))
    recorder = SightingRecorder(
        peer_repo,
        cast(Any, sightings),
        policy=PersistPolicy(max_attempts=2),
    )

    assert await recorder.record(_sightings(), "p1") is True
    assert sightings.insert_batch.await_count == 2


async def test_non_storage_errors_propagate(peer_repo: InMemoryPeerRepository) -> None:
    recorder = SightingRecorder(peer_repo, _failing_repo("insert_batch", RuntimeError("bug")))

    with pytest.raises(RuntimeError):
        await recorder.record(_sightings(), "p1")


# ---------------------------------------------------------------------------
# TxDetailRecorder
# ---------------------------------------------------------------------------


async def test_detail_recorder_commits_claims_on_success(
    detail_repo: InMemoryTxDetailRepository,
    seen_cache: InMemorySeenTxCache,
) -> None:
    seen_cache.claim("0xa")
    recorder = TxDetailRecorder(detail_repo, seen_cache)

    ok = await recorder.record([_detail("0xa")], ["0xa"])

    assert ok is True
    assert detail_repo.get("0xa") is not None
    assert seen_cache.contains_and_mark_recent("0xa") is True
    assert seen_cache.claimed_count == 0


async def test_detail_recorder_releases_claims_on_failure(
    seen_cache: InMemorySeenTxCache,
) -> None:
    seen_cache.claim("0xa")
    repo = _failing_repo("insert_batch")
    recorder = TxDetailRecorder(repo, seen_cache, policy=PersistPolicy(max_attempts=2))

    ok = await recorder.record([_detail("0xa")], ["0xa"])

    assert ok is False
    assert repo.insert_batch.await_count == 2
    assert seen_cache.contains_and_mark_recent("0xa") is False
    # a later sighting of the hash re-extracts it
    assert seen_cache.claim("0xa") is True


async def test_detail_recorder_raise_policy(seen_cache: InMemorySeenTxCache) -> None:
    seen_cache.claim("0xa")
    recorder = TxDetailRecorder(
        _failing_repo("insert_batch"),
        seen_cache,
        policy=PersistPolicy(on_failure="raise"),
    )

    with pytest.raises(BatchPersistError):
        await recorder.record([_detail("0xa")], ["0xa"])

    assert seen_cache.claimed_count == 0


@pytest.mark.parametrize("error", [RuntimeError("bug"), asyncio.CancelledError()])
async def test_detail_recorder_releases_claims_on_unexpected_error(
    seen_cache: InMemorySeenTxCache,
    error: BaseException,
) -> None:
    seen_cache.claim("0xa")
    recorder = TxDetailRecorder(_failing_repo("insert_batch", error), seen_cache)

    with pytest.raises(type(error)):
        await recorder.record([_detail("0xa")], ["0xa"])

    assert seen_cache.claimed_count == 0
    assert seen_cache.contains_and_mark_recent("0xa") is False
    assert seen_cache.claim("0xa") is True


# ---------------------------------------------------------------------------
# BlockFetchRecorder
# ---------------------------------------------------------------------------


async def test_block_recorder_stores_one_row_with_fresh_timestamp(
    peer_repo: InMemoryPeerRepository,
    block_repo: InMemoryBlockFetchRepository,
    clock: Any,
) -> None:
    recorder = BlockFetchRecorder(peer_repo, block_repo, clock=clock)
    block = FetchedBlock.create("0xblock", 19_000_000)

    record = await recorder.record(block, "p1", "1.2.3.4:30303", "10.0.0.1:30303")

    assert record is not None
    assert block_repo.list_all() == [record]
    assert record.first_seen_ms == 1_700_000_000_000
    assert (record.block_hash, record.block_number) == ("0xblock", 19_000_000)
    assert peer_repo.contains("p1")


async def test_block_insert_failure_propagates(peer_repo: InMemoryPeerRepository) -> None:
    recorder = BlockFetchRecorder(peer_repo, _failing_repo("insert"))

    with pytest.raises(SinglePersistError):
        await recorder.record(FetchedBlock.create("0xblock", 1), "p1", "r", "l")


async def test_block_peer_registration_failure_propagates(
    block_repo: InMemoryBlockFetchRepository,
) -> None:
    recorder = BlockFetchRecorder(_failing_repo("register"), block_repo)

    with pytest.raises(PeerRegistrationError):
        await recorder.record(FetchedBlock.create("0xblock", 1), "p1", "r", "l")
    assert block_repo.list_all() == []


async def test_block_failure_can_be_dropped_by_policy(peer_repo: InMemoryPeerRepository) -> None:
    recorder = BlockFetchRecorder(
        peer_repo,
        _failing_repo("insert"),
        policy=PersistPolicy(on_failure="drop"),
    )

    assert await recorder.record(FetchedBlock.create("0xblock", 1), "p1", "r", "l") is None
