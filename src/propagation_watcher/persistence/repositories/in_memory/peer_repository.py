# -*- coding: utf-8 -*-
"""In-memory peer registry."""

from __future__ import annotations

from propagation_watcher.persistence.repositories.interfaces.peer_repository import (
    IPeerRepository,
)


class InMemoryPeerRepository(IPeerRepository):
    """In-memory implementation of IPeerRepository."""

    def __init__(self) -> None:
        self._peers: set[str] = set()

    async def register(self, peer_id: str) -> None:
        self._peers.add(peer_id.strip())

    def contains(self, peer_id: str) -> bool:
        return peer_id.strip() in self._peers

    def list_all(self) -> list[str]:
        return sorted(self._peers)
