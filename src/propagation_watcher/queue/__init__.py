# -*- coding: utf-8 -*-
"""Bounded hand-off between ingestion entry points and the persistence writer."""

from propagation_watcher.queue.base import IAsyncQueue
from propagation_watcher.queue.in_memory_queue import InMemoryQueue
from propagation_watcher.queue.messages import QueueMessage

__all__ = ["IAsyncQueue", "InMemoryQueue", "QueueMessage"]
