# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from propagation_watcher.clients.http import AsyncHttpClient
from propagation_watcher.clients.trusted_peers_api import TrustedPeersApiClient
from propagation_watcher.config import Settings, get_settings
from propagation_watcher.consumers import PersistJobConsumer
from propagation_watcher.persistence.postgres import (
    PostgresBlockFetchRepository,
    PostgresDatabase,
    PostgresPeerRepository,
    PostgresSightingRepository,
    PostgresTxDetailRepository,
)
from propagation_watcher.persistence.repositories import (
    IBlockFetchRepository,
    IPeerRepository,
    ISeenTxCache,
    ISightingRepository,
    ITxDetailRepository,
    InMemorySeenTxCache,
    NoOpBlockFetchRepository,
    NoOpPeerRepository,
    NoOpSeenTxCache,
    NoOpSightingRepository,
    NoOpTxDetailRepository,
)
from propagation_watcher.queue import InMemoryQueue, QueueMessage
from propagation_watcher.services.ingestion import (
    BatchPersister,
    IngestionService,
    PersistJob,
    PersistQueue,
)
from propagation_watcher.services.preparation import TransactionPreparer
from propagation_watcher.services.recording import (
    BlockFetchRecorder,
    PersistKind,
    PersistPolicy,
    SightingRecorder,
    TxDetailRecorder,
)
from propagation_watcher.services.trusted_peers import TrustedPeersTracker
from propagation_watcher.services.watcher_runtime import WatcherRuntime


def _build_seen_cache(settings: Settings) -> ISeenTxCache:
    ing = settings.ingestion
    if ing.dry_run:
        return NoOpSeenTxCache()
    return InMemorySeenTxCache(
        max_entries=ing.cache_max_entries,
        ttl_seconds=ing.cache_ttl_seconds,
    )


def _build_peer_repository(settings: Settings, database: PostgresDatabase) -> IPeerRepository:
    if settings.ingestion.dry_run:
        return NoOpPeerRepository()
    return PostgresPeerRepository(database)


def _build_sighting_repository(
    settings: Settings, database: PostgresDatabase
) -> ISightingRepository:
    if settings.ingestion.dry_run:
        return NoOpSightingRepository()
    return PostgresSightingRepository(database)


def _build_tx_detail_repository(
    settings: Settings, database: PostgresDatabase
) -> ITxDetailRepository:
    if settings.ingestion.dry_run:
        return NoOpTxDetailRepository()
    return PostgresTxDetailRepository(database)


def _build_block_fetch_repository(
    settings: Settings, database: PostgresDatabase
) -> IBlockFetchRepository:
    if settings.ingestion.dry_run:
        return NoOpBlockFetchRepository()
    return PostgresBlockFetchRepository(database)


def _build_policy(settings: Settings, kind: PersistKind) -> PersistPolicy:
    return PersistPolicy.from_settings(settings.ingestion, kind)


def _build_persist_queue(settings: Settings) -> PersistQueue | None:
    """Writer queue, or None when batches are persisted inline (or not at all)."""
    ing = settings.ingestion
    if ing.dry_run or not ing.async_writer:
        return None
    return InMemoryQueue[QueueMessage[PersistJob]](maxsize=ing.writer_queue_size)


def _build_persist_consumer(
    queue: PersistQueue | None,
    batch_persister: BatchPersister,
) -> PersistJobConsumer | None:
    if queue is None:
        return None
    return PersistJobConsumer(queue=queue, batch_persister=batch_persister)


def _build_ingestion_service(
    settings: Settings,
    preparer: TransactionPreparer,
    batch_persister: BatchPersister,
    block_recorder: BlockFetchRecorder,
    seen_cache: ISeenTxCache,
    queue: PersistQueue | None,
) -> IngestionService:
    ing = settings.ingestion
    return IngestionService(
        preparer,
        batch_persister,
        block_recorder,
        seen_cache,
        queue=queue,
        overflow_policy=ing.overflow_policy,
        drain_timeout_seconds=ing.drain_timeout_seconds,
        dry_run=ing.dry_run,
        mark_seen_on_extract=ing.mark_seen_on_extract,
    )


class Container(containers.DeclarativeContainer):
    """Application container. Storage backend and cache follow ingestion.dry_run."""

    config = providers.Callable(get_settings)

    database = providers.Singleton(PostgresDatabase, settings=config)

    seen_cache = providers.Singleton(_build_seen_cache, config)

    peer_repository = providers.Singleton(_build_peer_repository, config, database)
    sighting_repository = providers.Singleton(_build_sighting_repository, config, database)
    tx_detail_repository = providers.Singleton(_build_tx_detail_repository, config, database)
    block_fetch_repository = providers.Singleton(_build_block_fetch_repository, config, database)

    sighting_policy = providers.Singleton(_build_policy, config, "sighting")
    detail_policy = providers.Singleton(_build_policy, config, "detail")
    block_policy = providers.Singleton(_build_policy, config, "block")

    transaction_preparer = providers.Singleton(TransactionPreparer, seen_cache=seen_cache)

    sighting_recorder = providers.Singleton(
        SightingRecorder,
        peer_repository=peer_repository,
        sighting_repository=sighting_repository,
        policy=sighting_policy,
    )

    tx_detail_recorder = providers.Singleton(
        TxDetailRecorder,
        detail_repository=tx_detail_repository,
        seen_cache=seen_cache,
        policy=detail_policy,
    )

    block_fetch_recorder = providers.Singleton(
        BlockFetchRecorder,
        peer_repository=peer_repository,
        block_fetch_repository=block_fetch_repository,
        policy=block_policy,
    )

    batch_persister = providers.Singleton(
        BatchPersister,
        sighting_recorder=sighting_recorder,
        detail_recorder=tx_detail_recorder,
        seen_cache=seen_cache,
    )

    persist_queue = providers.Singleton(_build_persist_queue, config)

    persist_consumer = providers.Singleton(
        _build_persist_consumer,
        persist_queue,
        batch_persister,
    )

    ingestion_service = providers.Singleton(
        _build_ingestion_service,
        config,
        transaction_preparer,
        batch_persister,
        block_fetch_recorder,
        seen_cache,
        persist_queue,
    )

    http_client = providers.Singleton(AsyncHttpClient, settings=config)

    trusted_peers_client = providers.Singleton(
        TrustedPeersApiClient,
        http_client=http_client,
        settings=config,
    )

    trusted_peers_tracker = providers.Singleton(
        TrustedPeersTracker,
        settings=config,
        api_client=trusted_peers_client,
    )

    watcher_runtime = providers.Singleton(
        WatcherRuntime,
        settings=config,
        ingestion_service=ingestion_service,
        database=database,
        consumer=persist_consumer,
        trusted_peers_tracker=trusted_peers_tracker,
        http_client=http_client,
    )
