"""Configuration subpackage."""

from propagation_watcher.config.config import (
    ApiSettings,
    AppSettings,
    FailurePolicyName,
    IngestionSettings,
    LoggingSettings,
    OverflowPolicyName,
    Settings,
    StorageSettings,
    TrustedPeersSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "FailurePolicyName",
    "IngestionSettings",
    "LoggingSettings",
    "OverflowPolicyName",
    "Settings",
    "StorageSettings",
    "TrustedPeersSettings",
    "get_settings",
]
