# -*- coding: utf-8 -*-
"""Wiring of stdlib handlers, structlog processors and the optional Logfire sink."""

from __future__ import annotations

import logging
import logfire
import structlog
from typing import Any, Optional
from structlog.types import EventDict, Processor
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from propagation_watcher.config import AppSettings, LoggingSettings, Settings, get_settings

# stdlib level name -> Logfire min_level
_LOGFIRE_LEVELS: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

_NOISY_LOGGERS: tuple[str, ...] = ("aiohttp.access", "asyncio")

_PLAIN = logging.Formatter("%(message)s")


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _identity_processor(app: AppSettings) -> Processor:
    """Stamp the logger name and watcher identity onto each event dict."""

    static: dict[str, Any] = {"app": app.name, "environment": app.environment}
    if app.node_label:
        static["node"] = app.node_label
    if app.version:
        static["version"] = app.version

    def _stamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        inner = getattr(logger, "_logger", logger)
        event_dict.setdefault("logger", getattr(inner, "name", "") or "")
        event_dict.update(static)
        return event_dict

    return _stamp


def _console_handler(cfg: LoggingSettings) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(_level(cfg.console_level))
    handler.setFormatter(_PLAIN)
    return handler


def _file_handler(cfg: LoggingSettings) -> logging.Handler:
    path = Path(cfg.file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path,
        when=cfg.file_rotate_when,
        interval=cfg.file_rotate_interval,
        backupCount=cfg.file_backups,
        encoding="utf-8",
        utc=cfg.file_rotate_utc,
    )
    handler.setLevel(_level(cfg.file_level))
    handler.setFormatter(_PLAIN)
    return handler


def _renderer(cfg: LoggingSettings) -> Optional[Processor]:
    # A file sink forces JSON so rotated files stay machine readable.
    if cfg.file_enabled or (cfg.console_enabled and cfg.console_json):
        return structlog.processors.JSONRenderer()
    if cfg.console_enabled:
        return structlog.dev.ConsoleRenderer()
    return None


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install handlers and the structlog pipeline.

    Safe to call more than once; stdlib handlers are replaced (``force=True``).
    """
    settings = settings or get_settings()
    app, cfg = settings.app, settings.logging

    handlers: list[logging.Handler] = []
    if cfg.console_enabled:
        handlers.append(_console_handler(cfg))
    if cfg.file_enabled:
        handlers.append(_file_handler(cfg))
    if handlers:
        logging.basicConfig(
            level=min(h.level for h in handlers), handlers=handlers, force=True
        )
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _identity_processor(app),
    ]

    if cfg.logfire_enabled:
        logfire.configure(
            token=cfg.logfire_token,
            service_name=app.node_label or app.name,
            service_version=app.version,
            environment=app.environment,
            min_level=_LOGFIRE_LEVELS[cfg.logfire_level],  # type: ignore[arg-type]
        )
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]

    renderer = _renderer(cfg)
    if renderer is not None:
        processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
