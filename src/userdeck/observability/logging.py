"""Structured logging configuration for userdeck.

Configures structlog for the whole package. Development mode renders
human-readable console output on stderr; production mode renders JSON.
File logging, when enabled, always writes JSON with daily rotation.

Event naming convention:
- dot.notation, domain.entity.verb_past_tense
  (e.g., "users.user.added", "remote.fetch.failed", "session.started")

Usage:
    from userdeck.observability import configure_logging, get_logger

    configure_logging(LoggingConfig(mode=LogMode.DEV))
    log = get_logger()
    log.info("session.started", origin="cache", user_count=12)
"""

from __future__ import annotations

from enum import Enum
import logging
from logging.handlers import TimedRotatingFileHandler
import os
from pathlib import Path
import sys
from typing import Any

from pydantic import BaseModel, Field
import structlog

from userdeck.core.security import (
    is_sensitive_field,
    is_sensitive_value,
    mask_api_key,
    sanitize_for_logging,
)


class LogMode(str, Enum):
    """Logging output mode."""

    DEV = "dev"
    PROD = "prod"


class LoggingConfig(BaseModel):
    """Runtime logging settings.

    Attributes:
        mode: Output mode (dev for human-readable, prod for JSON).
        log_level: Minimum log level to output.
        log_dir: Directory for log files.
        max_log_days: Number of days to retain log files.
        enable_file_logging: Whether to write logs to files.
    """

    mode: LogMode = Field(default=LogMode.DEV)
    log_level: str = Field(default="WARNING")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".userdeck" / "logs")
    max_log_days: int = Field(default=7, ge=1, le=365)
    enable_file_logging: bool = Field(default=False)

    model_config = {"frozen": True}


_configured: bool = False

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# structlog keys that are never masked
_RESERVED_KEYS = frozenset({"event", "level", "timestamp", "filename", "lineno"})


def _get_mode_from_env() -> LogMode:
    """Read USERDECK_LOG_MODE; anything other than "prod" means DEV."""
    if os.environ.get("USERDECK_LOG_MODE", "dev").lower() == "prod":
        return LogMode.PROD
    return LogMode.DEV


def _get_log_level(level_str: str) -> int:
    return _LEVELS.get(level_str.upper(), logging.INFO)


def _setup_file_handler(config: LoggingConfig) -> TimedRotatingFileHandler | None:
    """Create a daily-rotating handler, or None if file logging is off."""
    if not config.enable_file_logging:
        return None

    config.log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(config.log_dir / "userdeck.log"),
        when="midnight",
        interval=1,
        backupCount=config.max_log_days,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(_get_log_level(config.log_level))
    return handler


def _mask_sensitive_data(
    _logger: Any,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that masks API keys and similar secrets."""
    for key, value in list(event_dict.items()):
        if key in _RESERVED_KEYS:
            continue
        if is_sensitive_field(key):
            event_dict[key] = "<REDACTED>"
        elif isinstance(value, str) and is_sensitive_value(value):
            event_dict[key] = mask_api_key(value)
        elif isinstance(value, dict):
            event_dict[key] = sanitize_for_logging(value)
    return event_dict


def _get_shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        _mask_sensitive_data,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


class _ConsoleAndFileLogger:
    """Prints rendered entries to stderr and mirrors them to a file handler."""

    def __init__(self, file_handler: TimedRotatingFileHandler | None = None) -> None:
        self._file_handler = file_handler

    def _log(self, message: str, level: int) -> None:
        print(message, file=sys.stderr)
        if self._file_handler:
            record = logging.LogRecord(
                name="userdeck",
                level=level,
                pathname="",
                lineno=0,
                msg=message,
                args=(),
                exc_info=None,
            )
            self._file_handler.emit(record)

    def msg(self, message: str) -> None:
        self._log(message, logging.INFO)

    def debug(self, message: str) -> None:
        self._log(message, logging.DEBUG)

    def info(self, message: str) -> None:
        self._log(message, logging.INFO)

    def warning(self, message: str) -> None:
        self._log(message, logging.WARNING)

    def error(self, message: str) -> None:
        self._log(message, logging.ERROR)

    def critical(self, message: str) -> None:
        self._log(message, logging.CRITICAL)

    exception = error
    warn = warning
    fatal = critical


class _ConsoleAndFileLoggerFactory:
    def __init__(self, file_handler: TimedRotatingFileHandler | None = None) -> None:
        self._file_handler = file_handler

    def __call__(self, *_args: Any) -> _ConsoleAndFileLogger:
        return _ConsoleAndFileLogger(self._file_handler)


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog for the application.

    Call once at startup. Reconfiguring replaces any earlier file handler.

    Args:
        config: Logging configuration. If None, defaults are used with the
            mode taken from USERDECK_LOG_MODE.
    """
    global _configured

    if config is None:
        config = LoggingConfig(mode=_get_mode_from_env())

    log_level = _get_log_level(config.log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = _setup_file_handler(config)
    if file_handler:
        root_logger.addHandler(file_handler)

    processors = _get_shared_processors()
    if config.mode == LogMode.DEV and not file_handler:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=_ConsoleAndFileLoggerFactory(file_handler),
        cache_logger_on_first_use=False,
    )

    _configured = True


def get_logger(name: str | None = None) -> Any:
    """Get a bound logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in every subsequent log entry.

    Never bind secrets (API keys, credentials).
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove context variables from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def reset_logging() -> None:
    """Reset module state and structlog defaults. Intended for tests."""
    global _configured
    _configured = False
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
