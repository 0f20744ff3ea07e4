# -*- coding: utf-8 -*-
"""Queue consumers."""

from propagation_watcher.consumers.persist_job_consumer import PersistJobConsumer

__all__ = ["PersistJobConsumer"]
