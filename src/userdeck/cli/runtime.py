"""Shared setup for CLI commands: configuration, logging and session startup."""

import asyncio

import typer

from userdeck.cli.formatters.panels import print_error, print_warning
from userdeck.config.loader import apply_env_overrides, load_config_or_default, load_env_files
from userdeck.config.models import UserDeckConfig, get_config_dir
from userdeck.core.errors import ConfigError, FetchTimeoutError, PersistenceError
from userdeck.observability.logging import (
    LoggingConfig,
    LogMode,
    bind_context,
    clear_context,
    configure_logging,
)
from userdeck.persistence.adapter import PersistenceAdapter
from userdeck.persistence.storage import create_store
from userdeck.session import StartupReport, build_source, open_session
from userdeck.users.store import UserStore


def load_runtime_config() -> UserDeckConfig:
    """Load config.yaml (or defaults), apply env overrides, configure logging.

    Every log entry of the invocation carries the storage backend.
    Exits with code 1 on an invalid configuration.
    """
    load_env_files()
    try:
        config = apply_env_overrides(load_config_or_default())
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e

    configure_logging(
        LoggingConfig(
            mode=LogMode(config.logging.mode),
            log_level=config.logging.level.upper(),
            log_dir=get_config_dir() / "logs",
            max_log_days=config.logging.max_log_days,
            enable_file_logging=config.logging.file_logging,
        )
    )
    clear_context()
    bind_context(storage_backend=config.storage.backend)
    return config


async def _start(config: UserDeckConfig) -> tuple[UserStore, StartupReport]:
    async with open_session(config, source=build_source(config)) as session:
        report = await session.start()
    return session.store, report


def start_store(config: UserDeckConfig) -> UserStore:
    """Run session startup and return the populated store.

    A failed fetch is shown as an alert; the returned store is then empty
    but usable. Exits with code 1 only if storage cannot be opened.
    """
    try:
        store, report = asyncio.run(_start(config))
    except PersistenceError as e:
        print_error(f"Cannot open storage: {e.message}", title="Storage Error")
        raise typer.Exit(1) from e

    if report.error is not None:
        if isinstance(report.error, FetchTimeoutError):
            print_error("Failed to fetch users: the request timed out.")
        else:
            print_error(f"Failed to fetch users: {report.error.message}")
    elif report.origin == "remote" and not report.persisted:
        print_warning("Users were fetched but could not be cached.")
    return store


async def _clear_cache(config: UserDeckConfig) -> None:
    kv_store = create_store(config.storage)
    await kv_store.initialize()
    try:
        await PersistenceAdapter(kv_store, key=config.storage.key).clear()
    finally:
        await kv_store.close()


def clear_cache(config: UserDeckConfig) -> None:
    """Remove the cached origin set. Exits with code 1 on storage failure."""
    try:
        asyncio.run(_clear_cache(config))
    except PersistenceError as e:
        print_error(f"Cannot clear cache: {e.message}", title="Storage Error")
        raise typer.Exit(1) from e


async def _load_cached_count(config: UserDeckConfig) -> int | None:
    kv_store = create_store(config.storage)
    await kv_store.initialize()
    try:
        users = await PersistenceAdapter(kv_store, key=config.storage.key).load_origin()
    finally:
        await kv_store.close()
    return None if users is None else len(users)


def cached_count(config: UserDeckConfig) -> int | None:
    """Number of cached origin users, or None when nothing is cached.

    Exits with code 1 if the cache cannot be read.
    """
    try:
        return asyncio.run(_load_cached_count(config))
    except PersistenceError as e:
        print_error(f"Cannot read cache: {e.message}", title="Storage Error")
        raise typer.Exit(1) from e
