# -*- coding: utf-8 -*-
"""Unit tests for InMemorySeenTxCache (TTL, LRU capacity, claims)."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from propagation_watcher.persistence.repositories.in_memory import InMemorySeenTxCache


def test_unknown_hash_is_absent(seen_cache: InMemorySeenTxCache) -> None:
    assert seen_cache.contains_and_mark_recent("0xaa") is False
    assert len(seen_cache) == 0


def test_added_hash_is_present(seen_cache: InMemorySeenTxCache) -> None:
    seen_cache.add("0xaa")

    assert seen_cache.contains_and_mark_recent("0xaa") is True
    assert len(seen_cache) == 1


def test_entry_expires_after_ttl(seen_cache: InMemorySeenTxCache, timer: Any) -> None:
    seen_cache.add("0xaa")
    timer.advance(59.0)
    assert seen_cache.contains_and_mark_recent("0xaa") is True

    timer.advance(2.0)

    assert seen_cache.contains_and_mark_recent("0xaa") is False


def test_access_does_not_extend_ttl(seen_cache: InMemorySeenTxCache, timer: Any) -> None:
    seen_cache.add("0xaa")
    for _ in range(5):
        timer.advance(10.0)
        seen_cache.contains_and_mark_recent("0xaa")

    timer.advance(11.0)

    assert seen_cache.contains_and_mark_recent("0xaa") is False


def test_capacity_evicts_least_recently_used(timer: Any) -> None:
    cache = InMemorySeenTxCache(max_entries=2, ttl_seconds=60.0, timer=timer)
    cache.add("0xa")
    cache.add("0xb")
    # touching 0xa makes 0xb the least recently used entry
    assert cache.contains_and_mark_recent("0xa") is True

    cache.add("0xc")

    assert cache.contains_and_mark_recent("0xb") is False
    assert cache.contains_and_mark_recent("0xa") is True
    assert cache.contains_and_mark_recent("0xc") is True
    assert len(cache) == 2


def test_capacity_prefers_evicting_expired_entries(timer: Any) -> None:
    cache = InMemorySeenTxCache(max_entries=2, ttl_seconds=10.0, timer=timer)
    cache.add("0xold")
    timer.advance(8.0)
    cache.add("0xnew")
    cache.contains_and_mark_recent("0xold")
    timer.advance(3.0)

    cache.add("0xnewest")

    assert cache.contains_and_mark_recent("0xnew") is True
    assert cache.contains_and_mark_recent("0xnewest") is True
    assert cache.contains_and_mark_recent("0xold") is False


def test_claim_is_granted_once(seen_cache: InMemorySeenTxCache) -> None:
    assert seen_cache.claim("0xaa") is True
    assert seen_cache.claim("0xaa") is False
    # claimed is not the same as seen
    assert seen_cache.contains_and_mark_recent("0xaa") is False
    assert seen_cache.claimed_count == 1


def test_claim_is_refused_for_seen_hash(seen_cache: InMemorySeenTxCache) -> None:
    seen_cache.add("0xaa")

    assert seen_cache.claim("0xaa") is False


def test_commit_marks_seen_and_drops_claim(seen_cache: InMemorySeenTxCache) -> None:
    seen_cache.claim("0xaa")
    seen_cache.claim("0xbb")

    seen_cache.commit(["0xaa", "0xbb"])

    assert seen_cache.contains_and_mark_recent("0xaa") is True
    assert seen_cache.contains_and_mark_recent("0xbb") is True
    assert seen_cache.claimed_count == 0


def test_release_allows_a_new_claim(seen_cache: InMemorySeenTxCache) -> None:
    seen_cache.claim("0xaa")

    seen_cache.release(["0xaa"])

    assert seen_cache.contains_and_mark_recent("0xaa") is False
    assert seen_cache.claim("0xaa") is True


def test_claim_is_granted_again_after_expiry(
    seen_cache: InMemorySeenTxCache, timer: Any
) -> None:
    seen_cache.claim("0xaa")
    seen_cache.commit(["0xaa"])
    timer.advance(61.0)

    assert seen_cache.claim("0xaa") is True


def test_claim_is_won_by_exactly_one_thread() -> None:
    cache = InMemorySeenTxCache(max_entries=1000, ttl_seconds=60.0)
    workers = 16
    start = threading.Barrier(workers)

    def _race(_: int) -> bool:
        start.wait()
        return cache.claim("0xshared")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(_race, range(workers)))

    assert results.count(True) == 1
    assert cache.claimed_count == 1


def test_claims_stay_exclusive_while_threads_commit_and_release() -> None:
    cache = InMemorySeenTxCache(max_entries=10_000, ttl_seconds=60.0)
    hashes = [f"0x{i:064x}" for i in range(300)]
    workers = 8
    start = threading.Barrier(workers)
    guard = threading.Lock()
    holders: set[str] = set()
    wins: dict[str, int] = {}
    overlaps: list[str] = []

    def _run(_: int) -> None:
        start.wait()
        for h in hashes:
            if not cache.claim(h):
                continue
            with guard:
                if h in holders:
                    overlaps.append(h)
                holders.add(h)
                wins[h] = wins.get(h, 0) + 1
            with guard:
                holders.discard(h)
            # even hashes persist, odd ones fail and are released
            if int(h, 16) % 2 == 0:
                cache.commit([h])
            else:
                cache.release([h])

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(_run, range(workers)))

    assert overlaps == []
    assert cache.claimed_count == 0
    for h in hashes:
        if int(h, 16) % 2 == 0:
            assert wins[h] == 1
            assert cache.contains_and_mark_recent(h) is True
        else:
            assert 1 <= wins[h] <= workers
            assert cache.contains_and_mark_recent(h) is False
