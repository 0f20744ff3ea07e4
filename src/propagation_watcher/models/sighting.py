"""Sighting: one peer's timestamped report of a transaction hash.

Not unique per hash. Storage identity is (tx_hash, peer_id, first_seen_ms), so
re-delivering the same report is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Sighting:
    """A peer reported tx_hash at first_seen_ms (unix milliseconds)."""

    tx_hash: str
    peer_id: str
    first_seen_ms: int

    @classmethod
    def create(cls, tx_hash: str, peer_id: str, first_seen_ms: int) -> Sighting:
        """Create a sighting, rejecting empty identifiers and negative timestamps."""
        tx_hash = tx_hash.strip()
        peer_id = peer_id.strip()
        if not tx_hash or not peer_id:
            raise ValueError("tx_hash and peer_id must be non-empty")
        if first_seen_ms < 0:
            raise ValueError("first_seen_ms must be >= 0")
        return cls(tx_hash=tx_hash, peer_id=peer_id, first_seen_ms=int(first_seen_ms))

    def key(self) -> tuple[str, str, int]:
        """Uniqueness key used by storage."""
        return (self.tx_hash, self.peer_id, self.first_seen_ms)
