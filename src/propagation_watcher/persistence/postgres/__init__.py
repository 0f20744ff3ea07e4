# -*- coding: utf-8 -*-
"""PostgreSQL storage backend."""

from propagation_watcher.persistence.postgres.database import SCHEMA, PostgresDatabase
from propagation_watcher.persistence.postgres.repositories import (
    PostgresBlockFetchRepository,
    PostgresPeerRepository,
    PostgresSightingRepository,
    PostgresTxDetailRepository,
)

__all__ = [
    "SCHEMA",
    "PostgresBlockFetchRepository",
    "PostgresDatabase",
    "PostgresPeerRepository",
    "PostgresSightingRepository",
    "PostgresTxDetailRepository",
]
