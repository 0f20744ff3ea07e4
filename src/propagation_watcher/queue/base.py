# -*- coding: utf-8 -*-
"""Queue contract between ingestion (producers) and the persist-job writer (consumer)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IAsyncQueue[T](ABC):
    """Bounded FIFO with a non-blocking producer side.

    Ingestion callbacks must never wait on storage, so producers only get
    ``put_nowait`` and ``put_evicting``. The writer drains with ``get`` and
    acknowledges each item with ``task_done``; ``shutdown`` followed by
    ``join`` is how the runtime waits for in-flight jobs on exit.
    """

    @property
    @abstractmethod
    def maxsize(self) -> int:
        """Capacity; 0 means unbounded."""

    @abstractmethod
    def put_nowait(self, item: T) -> None:
        """Enqueue or raise QueueFull / QueueShutdown."""

    @abstractmethod
    def put_evicting(self, item: T) -> T | None:
        """Enqueue, pushing out the oldest item if at capacity.

        Returns the evicted item (already acknowledged) or None.
        Raises QueueShutdown once the queue is closed.
        """

    @abstractmethod
    async def get(self) -> T:
        """Wait for the next item; raises QueueShutdown once closed and drained."""

    @abstractmethod
    def get_nowait(self) -> T:
        """Next item or QueueEmpty / QueueShutdown."""

    @abstractmethod
    def task_done(self) -> None: ...

    @abstractmethod
    def shutdown(self, immediate: bool = False) -> None:
        """Close for producers; ``immediate`` also discards what is queued."""

    @abstractmethod
    async def join(self) -> None: ...

    @abstractmethod
    def qsize(self) -> int: ...
