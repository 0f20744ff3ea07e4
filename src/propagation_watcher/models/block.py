"""Fetched blocks and the per-(block, peer) observation record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FetchedBlock:
    """Block descriptor handed over by the dispatcher (no body, no validation)."""

    hash: str
    number: int

    @classmethod
    def create(cls, block_hash: str, number: int) -> FetchedBlock:
        block_hash = block_hash.strip()
        if not block_hash:
            raise ValueError("block hash must be non-empty")
        if number < 0:
            raise ValueError("block number must be >= 0")
        return cls(hash=block_hash, number=int(number))


@dataclass(frozen=True, slots=True)
class BlockFetchRecord:
    """One block-observation event, tied to the reporting peer and its addresses."""

    block_hash: str
    block_number: int
    first_seen_ms: int
    peer_id: str
    peer_remote_addr: str
    peer_local_addr: str
