# -*- coding: utf-8 -*-
"""Unit tests for TransactionPreparer (sightings, dedup claims, detail extraction)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

import pytest
from eth_utils import to_checksum_address

from propagation_watcher.exceptions import SignerRecoveryError
from propagation_watcher.models.transaction import ObservedTransaction
from propagation_watcher.models.tx_detail import RECIPIENT_SENTINEL, SIGNER_SENTINEL
from propagation_watcher.persistence.repositories.in_memory import InMemorySeenTxCache
from propagation_watcher.services.preparation import TransactionPreparer

FAKE_SIGNER = "0x1111111111111111111111111111111111111111"
LOWERCASE_RECEIVER = "0x" + "ab" * 20


def _fake_recovery(tx: ObservedTransaction) -> str:
    return FAKE_SIGNER


@pytest.fixture
def preparer(seen_cache: InMemorySeenTxCache, clock: Any) -> TransactionPreparer:
    return TransactionPreparer(seen_cache, clock=clock, signer_recovery=_fake_recovery)


def test_every_transaction_gets_a_sighting_in_order(
    preparer: TransactionPreparer,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    txs = [unsigned_tx_factory(f"t{i}") for i in range(3)]

    batch = preparer.prepare(txs, "p1")

    assert [s.tx_hash for s in batch.sightings] == [tx.tx_hash for tx in txs]
    assert {s.peer_id for s in batch.sightings} == {"p1"}


def test_clock_is_read_once_per_transaction(
    seen_cache: InMemorySeenTxCache,
    clock: Any,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    preparer = TransactionPreparer(seen_cache, clock=clock, signer_recovery=_fake_recovery)

    batch = preparer.prepare([unsigned_tx_factory("a"), unsigned_tx_factory("b")], "p1")

    assert clock.calls == 2
    # sighting and detail of the same transaction share one timestamp
    assert [s.first_seen_ms for s in batch.sightings] == [d.first_seen_ms for d in batch.details]


def test_cached_hash_yields_sighting_but_no_detail(
    preparer: TransactionPreparer,
    seen_cache: InMemorySeenTxCache,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    h1, h2, h3 = (unsigned_tx_factory(t) for t in ("h1", "h2", "h3"))
    seen_cache.add(h2.tx_hash)

    batch = preparer.prepare([h1, h2, h3], "p1")

    assert len(batch.sightings) == 3
    assert [d.tx_hash for d in batch.details] == [h1.tx_hash, h3.tx_hash]
    assert batch.claimed_hashes == [h1.tx_hash, h3.tx_hash]


def test_duplicate_hash_inside_one_batch_is_extracted_once(
    preparer: TransactionPreparer,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    tx = unsigned_tx_factory("dup")

    batch = preparer.prepare([tx, tx], "p1")

    assert len(batch.sightings) == 2
    assert len(batch.details) == 1


def test_mark_seen_commits_immediately(
    preparer: TransactionPreparer,
    seen_cache: InMemorySeenTxCache,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    tx = unsigned_tx_factory("x")

    batch = preparer.prepare([tx], "p1", mark_seen=True)

    assert batch.claimed_hashes == []
    assert seen_cache.contains_and_mark_recent(tx.tx_hash) is True


def test_fee_is_exact_beyond_64_bits(
    preparer: TransactionPreparer,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    gas_price = 3 * 2**64 + 17
    gas = 30_000_000
    tx = unsigned_tx_factory("big", gas_price=gas_price, gas_fee_cap=gas_price, gas=gas)

    detail = preparer.prepare([tx], "p1").details[0]

    assert detail.fee == str(gas_price * gas)
    assert int(detail.fee) > 2**64
    assert detail.gas_fee_cap == str(gas_price)


def test_contract_creation_gets_recipient_sentinel(
    preparer: TransactionPreparer,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    tx = unsigned_tx_factory("create", to=None)

    detail = preparer.prepare([tx], "p1").details[0]

    assert detail.receiver == RECIPIENT_SENTINEL


def test_receiver_is_checksummed_like_the_signer(
    seen_cache: InMemorySeenTxCache,
    signed_tx_factory: Callable[..., ObservedTransaction],
    signer_address: str,
) -> None:
    preparer = TransactionPreparer(seen_cache)
    tx = signed_tx_factory(nonce=1)
    lowered = replace(tx, to=LOWERCASE_RECEIVER)

    detail = preparer.prepare([lowered], "p1").details[0]

    assert detail.receiver == to_checksum_address(LOWERCASE_RECEIVER)
    assert detail.signer == signer_address


def test_decimal_string_fields(
    preparer: TransactionPreparer,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    tx = unsigned_tx_factory("d", nonce=42, gas_fee_cap=300, gas_tip_cap=7)

    detail = preparer.prepare([tx], "p1").details[0]

    assert (detail.nonce, detail.gas_fee_cap, detail.gas_tip_cap) == ("42", "300", "7")
    assert detail.signer == FAKE_SIGNER


def test_real_signatures_recover_the_sender(
    seen_cache: InMemorySeenTxCache,
    signed_tx_factory: Callable[..., ObservedTransaction],
    signer_address: str,
) -> None:
    preparer = TransactionPreparer(seen_cache)
    txs = [signed_tx_factory(0), signed_tx_factory(1, dynamic=True)]

    batch = preparer.prepare(txs, "p1")

    assert [d.signer for d in batch.details] == [signer_address, signer_address]
    assert batch.details[1].fee == str(30_000_000_000 * 21_000)


def test_signer_failure_in_five_transaction_batch_is_isolated(
    seen_cache: InMemorySeenTxCache,
    signed_tx_factory: Callable[..., ObservedTransaction],
    unsigned_tx_factory: Callable[..., ObservedTransaction],
    signer_address: str,
) -> None:
    preparer = TransactionPreparer(seen_cache)
    txs = [signed_tx_factory(n) for n in range(4)]
    txs.insert(2, unsigned_tx_factory("not-a-transaction"))

    batch = preparer.prepare(txs, "p1")

    assert len(batch.sightings) == 5
    assert len(batch.details) == 5
    signers = [d.signer for d in batch.details]
    assert signers[2] == SIGNER_SENTINEL
    assert signers.count(signer_address) == 4


def test_unexpected_extraction_error_releases_claim(
    seen_cache: InMemorySeenTxCache,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    def _explode(tx: ObservedTransaction) -> str:
        raise RuntimeError("bug")

    preparer = TransactionPreparer(seen_cache, signer_recovery=_explode)
    tx = unsigned_tx_factory("boom")

    with pytest.raises(RuntimeError):
        preparer.prepare([tx], "p1")

    assert seen_cache.claimed_count == 0
    assert seen_cache.claim(tx.tx_hash) is True


def test_recovery_error_is_logged_with_hash(
    seen_cache: InMemorySeenTxCache,
    unsigned_tx_factory: Callable[..., ObservedTransaction],
) -> None:
    logged: list[tuple[str, dict[str, Any]]] = []

    class _Logger:
        def warning(self, event: str, **kw: Any) -> None:
            logged.append((event, kw))

        def debug(self, event: str, **kw: Any) -> None:
            pass

    def _fail(tx: ObservedTransaction) -> str:
        raise SignerRecoveryError("bad signature", tx_hash=tx.tx_hash)

    preparer = TransactionPreparer(
        seen_cache, signer_recovery=_fail, get_logger=lambda name: _Logger()
    )
    tx = unsigned_tx_factory("bad")

    preparer.prepare([tx], "p1")

    assert logged[0][0] == "signer_recovery_failed"
    assert logged[0][1]["tx_hash"] == tx.tx_hash
