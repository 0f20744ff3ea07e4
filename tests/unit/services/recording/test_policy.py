# -*- coding: utf-8 -*-
"""Unit tests for PersistPolicy and run_with_policy."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from propagation_watcher.config import IngestionSettings
from propagation_watcher.exceptions import StorageError, StorageTimeoutError
from propagation_watcher.services.recording import (
    BLOCK_DEFAULT,
    DETAIL_DEFAULT,
    SIGHTING_DEFAULT,
    PersistPolicy,
    run_with_policy,
)


def test_defaults_per_kind() -> None:
    assert (SIGHTING_DEFAULT.max_attempts, SIGHTING_DEFAULT.on_failure) == (1, "drop")
    assert (DETAIL_DEFAULT.max_attempts, DETAIL_DEFAULT.on_failure) == (2, "drop")
    assert (BLOCK_DEFAULT.max_attempts, BLOCK_DEFAULT.on_failure) == (1, "raise")
    assert BLOCK_DEFAULT.raises is True


def test_from_settings_reads_each_kind() -> None:
    ingestion = IngestionSettings(
        sighting_max_attempts=3,
        sighting_failure_policy="raise",
        block_failure_policy="drop",
        retry_backoff_seconds=0.0,
    )

    sighting = PersistPolicy.from_settings(ingestion, "sighting")
    block = PersistPolicy.from_settings(ingestion, "block")

    assert sighting == PersistPolicy(max_attempts=3, backoff_seconds=0.0, on_failure="raise")
    assert block.on_failure == "drop"


def test_invalid_attempts_rejected() -> None:
    with pytest.raises(ValueError):
        PersistPolicy(max_attempts=0)


def test_backoff_is_exponential_and_capped() -> None:
    policy = PersistPolicy(max_attempts=5, backoff_seconds=0.5)

    assert [policy.backoff_delay(a) for a in range(5)] == [0.5, 1.0, 2.0, 4.0, 4.0]
    assert PersistPolicy().backoff_delay(3) == 0.0


async def test_retries_storage_errors_until_success() -> None:
    operation = AsyncMock(side_effect=[StorageError("down"), 7])
    retries: list[int] = []

    result = await run_with_policy(
        PersistPolicy(max_attempts=2),
        operation,
        on_retry=lambda attempt, e: retries.append(attempt),
    )

    assert result == 7
    assert operation.await_count == 2
    assert retries == [1]


async def test_last_storage_error_propagates_after_attempts() -> None:
    errors = [StorageError("first"), StorageError("second")]
    operation = AsyncMock(side_effect=errors)

    with pytest.raises(StorageError) as exc_info:
        await run_with_policy(PersistPolicy(max_attempts=2), operation)

    assert exc_info.value is errors[1]


async def test_other_errors_are_not_retried() -> None:
    operation = AsyncMock(side_effect=RuntimeError("bug"))

    with pytest.raises(RuntimeError):
        await run_with_policy(PersistPolicy(max_attempts=3), operation)

    assert operation.await_count == 1


async def test_timeout_with_unknown_outcome_is_not_retried() -> None:
    unknown = StorageTimeoutError("insert_block_fetch", outcome_unknown=True)
    operation = AsyncMock(side_effect=[unknown, 1])

    with pytest.raises(StorageTimeoutError) as exc_info:
        await run_with_policy(PersistPolicy(max_attempts=3), operation)

    assert exc_info.value is unknown
    assert operation.await_count == 1


async def test_rolled_back_timeout_is_retried() -> None:
    operation = AsyncMock(side_effect=[StorageTimeoutError("insert_block_fetch"), 1])

    assert await run_with_policy(PersistPolicy(max_attempts=2), operation) == 1
    assert operation.await_count == 2
