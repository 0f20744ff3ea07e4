# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, STORAGE__HOST.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FailurePolicyName = Literal["drop", "raise"]
OverflowPolicyName = Literal["drop_oldest", "reject"]
LevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
RotationWhen = Literal[
    "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
]


class AppSettings(BaseSettings):
    """Identity of this watcher process, stamped onto every log event."""

    model_config = SettingsConfigDict(extra="ignore")

    name: str = "propagation-watcher"
    node_label: Optional[str] = Field(
        default=None,
        description="Label of the node this watcher is attached to (e.g. 'mainnet-eu-1').",
    )
    version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Where log events go and at which level."""

    model_config = SettingsConfigDict(extra="ignore")

    console_enabled: bool = True
    console_level: LevelName = "INFO"
    console_json: bool = Field(
        default=False,
        description="Render console output as JSON instead of structlog's dev renderer.",
    )

    file_enabled: bool = False
    file_level: LevelName = "INFO"
    file_path: str = "logs/propagation_watcher.log"
    file_rotate_when: RotationWhen = "midnight"
    file_rotate_interval: int = Field(default=1, ge=1)
    file_backups: int = Field(default=14, ge=0)
    file_rotate_utc: bool = True

    logfire_enabled: bool = False
    logfire_level: LevelName = "INFO"
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """Configuration shared by outbound HTTP calls."""

    model_config = SettingsConfigDict(extra="ignore")

    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP request timeout in seconds.",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum number of attempts for failed requests.",
    )


class StorageSettings(BaseSettings):
    """PostgreSQL connection and per-call limits (from env STORAGE__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = "postgres"
    password: Optional[str] = Field(default=None, description="Database password.")
    database: str = "propagation"
    min_connections: int = Field(default=1, ge=1, le=64)
    max_connections: int = Field(default=8, ge=1, le=256)
    connect_timeout_seconds: int = Field(default=5, ge=1, le=120)
    call_timeout_seconds: float = Field(
        default=5.0,
        ge=0.1,
        le=120.0,
        description="Upper bound for a single storage call, measured on the caller side.",
    )
    statement_timeout_ms: int = Field(
        default=5000,
        ge=0,
        description="Server-side statement_timeout applied to every pooled connection (0 disables).",
    )
    create_schema: bool = Field(
        default=False,
        description="Apply the bundled CREATE TABLE IF NOT EXISTS statements on open.",
    )


class IngestionSettings(BaseSettings):
    """Dedup cache, persistence writer and failure policies (from env INGESTION__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    dry_run: bool = Field(
        default=False,
        description="Accept every ingestion call without touching the cache or storage.",
    )
    cache_max_entries: int = Field(default=1_000_000, ge=1)
    cache_ttl_seconds: float = Field(default=24 * 60 * 60, gt=0)

    async_writer: bool = Field(
        default=True,
        description="Persist transaction batches from a bounded background queue instead of inline.",
    )
    writer_queue_size: int = Field(default=1000, ge=1, le=1_000_000)
    overflow_policy: OverflowPolicyName = "drop_oldest"
    drain_timeout_seconds: float = Field(default=10.0, ge=0.0, le=600.0)

    sighting_failure_policy: FailurePolicyName = "drop"
    sighting_max_attempts: int = Field(default=1, ge=1, le=10)
    detail_failure_policy: FailurePolicyName = "drop"
    detail_max_attempts: int = Field(default=2, ge=1, le=10)
    block_failure_policy: FailurePolicyName = "raise"
    block_max_attempts: int = Field(default=1, ge=1, le=10)
    retry_backoff_seconds: float = Field(default=0.25, ge=0.0, le=30.0)

    mark_seen_on_extract: bool = Field(
        default=False,
        description="Mark hashes seen as soon as details are extracted, before they are stored.",
    )


class TrustedPeersSettings(BaseSettings):
    """Trusted peers polling (from env TRUSTED_PEERS__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = False
    base_url: str = Field(
        default="",
        description="Dashboard base URL; GET <base_url>/top-peers returns a JSON list of peer ids.",
    )
    poll_seconds: float = Field(default=600.0, ge=1.0, le=86400.0)


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, INGESTION__DRY_RUN.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    trusted_peers: TrustedPeersSettings = Field(default_factory=TrustedPeersSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.:
        - from_env(ingestion={"dry_run": True})
        - from_env(storage={"host": "db", "port": 5433})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from propagation_watcher.config import get_settings

        settings = get_settings()
        ttl = settings.ingestion.cache_ttl_seconds
    """
    return Settings()
