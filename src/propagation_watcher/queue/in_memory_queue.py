# -*- coding: utf-8 -*-
"""asyncio-backed IAsyncQueue."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from typing import Iterator

from propagation_watcher.exceptions import QueueEmpty, QueueFull, QueueShutdown
from propagation_watcher.queue.base import IAsyncQueue

_TRANSLATED: tuple[tuple[type[Exception], type[Exception]], ...] = (
    (asyncio.QueueShutDown, QueueShutdown),
    (asyncio.QueueFull, QueueFull),
    (asyncio.QueueEmpty, QueueEmpty),
)


@contextmanager
def _package_errors() -> Iterator[None]:
    """Re-raise asyncio queue errors as the package's own queue errors."""
    try:
        yield
    except (asyncio.QueueShutDown, asyncio.QueueFull, asyncio.QueueEmpty) as exc:
        for source, target in _TRANSLATED:
            if isinstance(exc, source):
                raise target(str(exc) or target.__name__) from exc
        raise


class InMemoryQueue[T](IAsyncQueue[T]):
    """Wraps asyncio.Queue; needs Python 3.13 for ``shutdown``."""

    def __init__(self, maxsize: int = 0) -> None:
        self._inner: asyncio.Queue[T] = asyncio.Queue(maxsize=maxsize)

    def __len__(self) -> int:
        return self._inner.qsize()

    @property
    def maxsize(self) -> int:
        return self._inner.maxsize

    def put_nowait(self, item: T) -> None:
        with _package_errors():
            self._inner.put_nowait(item)

    def put_evicting(self, item: T) -> T | None:
        # No await between pop and push: nothing can slip in between.
        try:
            self.put_nowait(item)
            return None
        except QueueFull:
            pass
        with _package_errors():
            oldest = self._inner.get_nowait()
            self._inner.task_done()
            self._inner.put_nowait(item)
        return oldest

    async def get(self) -> T:
        with _package_errors():
            return await self._inner.get()

    def get_nowait(self) -> T:
        with _package_errors():
            return self._inner.get_nowait()

    def task_done(self) -> None:
        self._inner.task_done()

    def shutdown(self, immediate: bool = False) -> None:
        self._inner.shutdown(immediate)

    async def join(self) -> None:
        await self._inner.join()

    def qsize(self) -> int:
        return self._inner.qsize()
