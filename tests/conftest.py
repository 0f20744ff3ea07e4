# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from eth_account import Account

from propagation_watcher.models.transaction import ObservedTransaction
from propagation_watcher.persistence.repositories.in_memory import (
    InMemoryBlockFetchRepository,
    InMemoryPeerRepository,
    InMemorySeenTxCache,
    InMemorySightingRepository,
    InMemoryTxDetailRepository,
)

# Well-known throwaway key; never holds funds.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
RECIPIENT = "0x3535353535353535353535353535353535353535"


class StepClock:
    """Deterministic unix-ms clock: returns start, start+step, start+2*step, ..."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1) -> None:
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value


class FakeTimer:
    """Monotonic seconds under test control (for TTL expiry)."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def peer_id() -> str:
    """Default reporting peer used by tests."""
    return "p1"


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def seen_cache(timer: FakeTimer) -> InMemorySeenTxCache:
    return InMemorySeenTxCache(max_entries=1000, ttl_seconds=60.0, timer=timer)


@pytest.fixture
def peer_repo() -> InMemoryPeerRepository:
    return InMemoryPeerRepository()


@pytest.fixture
def sighting_repo() -> InMemorySightingRepository:
    return InMemorySightingRepository()


@pytest.fixture
def detail_repo() -> InMemoryTxDetailRepository:
    return InMemoryTxDetailRepository()


@pytest.fixture
def block_repo() -> InMemoryBlockFetchRepository:
    return InMemoryBlockFetchRepository()


@pytest.fixture
def signer_address() -> str:
    return Account.from_key(TEST_PRIVATE_KEY).address


@pytest.fixture
def signed_tx_factory() -> Callable[..., ObservedTransaction]:
    """Sign a real transaction with TEST_PRIVATE_KEY and wrap it as ObservedTransaction.

    dynamic=True builds an EIP-1559 transaction, otherwise an EIP-155 legacy one.
    """

    def _build(nonce: int = 0, *, dynamic: bool = False, **overrides: Any) -> ObservedTransaction:
        fields: dict[str, Any] = {
            "nonce": nonce,
            "gas": 21_000,
            "to": RECIPIENT,
            "value": 1,
            "data": b"",
            "chainId": 1,
        }
        if dynamic:
            fields["maxFeePerGas"] = 30_000_000_000
            fields["maxPriorityFeePerGas"] = 2_000_000_000
        else:
            fields["gasPrice"] = 20_000_000_000
        fields.update(overrides)
        signed = Account.sign_transaction(fields, TEST_PRIVATE_KEY)
        return ObservedTransaction.from_fields(signed.raw_transaction, fields)

    return _build


@pytest.fixture
def unsigned_tx_factory() -> Callable[..., ObservedTransaction]:
    """ObservedTransaction with arbitrary raw bytes; pair it with a fake signer recovery."""

    def _build(tag: str = "tx", **overrides: Any) -> ObservedTransaction:
        values: dict[str, Any] = {
            "raw": tag.encode(),
            "nonce": 7,
            "gas": 21_000,
            "gas_price": 10,
            "gas_fee_cap": 10,
            "gas_tip_cap": 10,
            "to": RECIPIENT,
        }
        values.update(overrides)
        return ObservedTransaction(**values)

    return _build
