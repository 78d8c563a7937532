"""Session startup: cached origin set, or a one-time remote fetch.

A session starts by reading the cached origin set. Only when nothing is
cached does it fetch from the remote source, and then it writes the result
to storage exactly once. Failures never end the session:

- unreadable cache: logged, treated as no cache
- fetch failure or timeout: logged and reported, store stays empty but usable
- write failure after a fetch: logged, fetched users stay usable

Usage:
    async with open_session(config) as session:
        report = await session.start()
        page = session.store.get_page(1)
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import structlog

from userdeck.config.models import UserDeckConfig
from userdeck.core.errors import PersistenceError, RemoteFetchError, UserDeckError
from userdeck.persistence.adapter import PersistenceAdapter
from userdeck.persistence.storage import create_store
from userdeck.sources.remote import RemoteUserSource
from userdeck.users.models import User
from userdeck.users.store import UserStore

log = structlog.get_logger(__name__)

StartupOrigin = Literal["cache", "remote", "empty"]


@dataclass(frozen=True, slots=True)
class StartupReport:
    """Outcome of session startup.

    Attributes:
        origin: Where the origin set came from; "empty" when the fetch failed.
        user_count: Number of users available after startup.
        error: The fetch error that left the store empty, if any.
        persisted: Whether a freshly fetched origin set was written to storage.
    """

    origin: StartupOrigin
    user_count: int
    error: UserDeckError | None = None
    persisted: bool = False


class UserSession:
    """Wires a UserStore to its persistence and remote source."""

    def __init__(
        self,
        store: UserStore,
        persistence: PersistenceAdapter,
        source: RemoteUserSource,
    ) -> None:
        self.store = store
        self.persistence = persistence
        self.source = source
        self.report: StartupReport | None = None

    async def _load_cached(self) -> list[User] | None:
        try:
            return await self.persistence.load_origin()
        except PersistenceError as e:
            log.warning("session.cache.unreadable", error=e.message, operation=e.operation)
            return None

    async def start(self) -> StartupReport:
        """Populate the store from cache, or from the remote source.

        Returns:
            A StartupReport describing where the users came from.
        """
        cached = await self._load_cached()
        if not self.store.initialize(cached):
            self.report = StartupReport(origin="cache", user_count=len(self.store))
            log.info("session.started", origin="cache", user_count=len(self.store))
            return self.report

        try:
            pages = await self.source.fetch_all()
        except RemoteFetchError as e:
            log.error(
                "session.fetch.failed",
                error=e.message,
                url=e.url,
                status_code=e.status_code,
            )
            self.report = StartupReport(origin="empty", user_count=len(self.store), error=e)
            return self.report

        origin = self.store.adopt_remote(pages)
        persisted = False
        try:
            await self.persistence.save_origin(origin)
        except PersistenceError as e:
            log.error("session.cache.write_failed", error=e.message, operation=e.operation)
        else:
            self.store.mark_persisted()
            persisted = True

        self.report = StartupReport(
            origin="remote",
            user_count=len(self.store),
            persisted=persisted,
        )
        log.info("session.started", origin="remote", user_count=len(self.store))
        return self.report


def build_store(config: UserDeckConfig) -> UserStore:
    """Create an empty UserStore from the store section of the config."""
    return UserStore(
        page_size=config.store.page_size,
        first_added_id=config.store.first_added_id,
        placeholder_avatar=config.store.placeholder_avatar,
    )


def build_source(config: UserDeckConfig) -> RemoteUserSource:
    """Create the RemoteUserSource described by the remote section."""
    return RemoteUserSource(
        config.remote.base_url,
        pages=config.remote.pages,
        timeout=config.remote.timeout_seconds,
        api_key=config.remote.api_key,
        placeholder_avatar=config.store.placeholder_avatar,
    )


@asynccontextmanager
async def open_session(
    config: UserDeckConfig,
    *,
    config_dir: Path | None = None,
    source: RemoteUserSource | None = None,
) -> AsyncIterator[UserSession]:
    """Open storage and yield an unstarted UserSession.

    Args:
        config: Validated configuration.
        config_dir: Base directory for relative storage paths.
        source: Override the remote source (used by tests).

    Yields:
        A UserSession; storage is closed when the context exits.

    Raises:
        PersistenceError: If the storage backend cannot be initialized.
    """
    kv_store = create_store(config.storage, config_dir)
    await kv_store.initialize()
    try:
        yield UserSession(
            build_store(config),
            PersistenceAdapter(kv_store, key=config.storage.key),
            source if source is not None else build_source(config),
        )
    finally:
        await kv_store.close()
