"""Key-value storage backends.

The persistence layer needs one thing: a durable slot that maps a string key
to a string value. Three backends provide it:

- JsonFileStore: all keys in one JSON object file, guarded by file locks.
- SqliteKeyValueStore: SQLAlchemy Core over aiosqlite.
- InMemoryStore: a dict, for sessions that must not touch disk.

Every backend failure is raised as PersistenceError.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
import fcntl
import json
import os
from pathlib import Path
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from userdeck.config.models import StorageConfig, get_config_dir
from userdeck.core.errors import PersistenceError
from userdeck.persistence.schema import kv_entries_table, metadata


class KeyValueStore(Protocol):
    """A durable string-to-string slot store."""

    async def initialize(self) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


@contextmanager
def _file_lock(file_path: Path, exclusive: bool = True) -> Iterator[None]:
    """Hold an fcntl lock on a sidecar ``.lock`` file.

    Args:
        file_path: Path of the file being protected.
        exclusive: Exclusive lock for writes, shared lock for reads.
    """
    lock_path = file_path.with_suffix(file_path.suffix + ".lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    with open(lock_path, "w") as lock_file:
        lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        try:
            fcntl.flock(lock_file.fileno(), lock_type)
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


class JsonFileStore:
    """Key-value store backed by a single JSON object file.

    Writes go to a temporary file that atomically replaces the original,
    so a crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        """Create the parent directory. Idempotent."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PersistenceError(
                f"Storage file is not valid JSON: {e}",
                operation="read",
                details={"path": str(self._path)},
            ) from e
        except OSError as e:
            raise PersistenceError(
                f"Failed to read storage file: {e}",
                operation="read",
                details={"path": str(self._path)},
            ) from e
        if not isinstance(data, dict):
            raise PersistenceError(
                "Storage file must contain a JSON object",
                operation="read",
                details={"path": str(self._path)},
            )
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PersistenceError(
                f"Failed to write storage file: {e}",
                operation="write",
                details={"path": str(self._path)},
            ) from e

    async def get(self, key: str) -> str | None:
        with _file_lock(self._path, exclusive=False):
            value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise PersistenceError(
                "Stored value is not a string",
                operation="get",
                key=key,
            )
        return value

    async def set(self, key: str, value: str) -> None:
        with _file_lock(self._path, exclusive=True):
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    async def delete(self, key: str) -> None:
        with _file_lock(self._path, exclusive=True):
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)

    async def close(self) -> None:
        return None


class SqliteKeyValueStore:
    """Key-value store in a SQLite table, via SQLAlchemy Core and aiosqlite.

    Usage:
        store = SqliteKeyValueStore("sqlite+aiosqlite:///storage.db")
        await store.initialize()
        await store.set("originalUsers", "[]")
        await store.close()
    """

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: AsyncEngine | None = None

    async def initialize(self) -> None:
        """Open the engine and create the table. Idempotent."""
        if self._engine is None:
            self._engine = create_async_engine(self._database_url, echo=False)
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except Exception as e:
            raise PersistenceError(
                f"Failed to initialize storage: {e}",
                operation="initialize",
            ) from e

    def _require_engine(self, operation: str) -> AsyncEngine:
        if self._engine is None:
            raise PersistenceError(
                "SqliteKeyValueStore not initialized. Call initialize() first.",
                operation=operation,
            )
        return self._engine

    async def get(self, key: str) -> str | None:
        engine = self._require_engine("get")
        try:
            async with engine.begin() as conn:
                result = await conn.execute(
                    select(kv_entries_table.c.value).where(kv_entries_table.c.key == key)
                )
                return result.scalar_one_or_none()
        except Exception as e:
            raise PersistenceError(f"Failed to read key: {e}", operation="get", key=key) from e

    async def set(self, key: str, value: str) -> None:
        engine = self._require_engine("set")
        now = datetime.now(UTC)
        statement = sqlite_insert(kv_entries_table).values(key=key, value=value, updated_at=now)
        statement = statement.on_conflict_do_update(
            index_elements=[kv_entries_table.c.key],
            set_={"value": value, "updated_at": now},
        )
        try:
            async with engine.begin() as conn:
                await conn.execute(statement)
        except Exception as e:
            raise PersistenceError(f"Failed to write key: {e}", operation="set", key=key) from e

    async def delete(self, key: str) -> None:
        engine = self._require_engine("delete")
        try:
            async with engine.begin() as conn:
                await conn.execute(delete(kv_entries_table).where(kv_entries_table.c.key == key))
        except Exception as e:
            raise PersistenceError(
                f"Failed to delete key: {e}", operation="delete", key=key
            ) from e

    async def close(self) -> None:
        """Dispose of the engine. Safe to call more than once."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None


class InMemoryStore:
    """Dict-backed store; contents live only as long as the instance."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def initialize(self) -> None:
        return None

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        return None


def create_store(config: StorageConfig, config_dir: Path | None = None) -> KeyValueStore:
    """Build the configured storage backend.

    Args:
        config: Storage section of the configuration.
        config_dir: Base directory for relative paths. Defaults to the
            userdeck config directory.

    Returns:
        An uninitialized KeyValueStore.
    """
    if config.backend == "memory":
        return InMemoryStore()

    base_dir = config_dir if config_dir is not None else get_config_dir()
    path = Path(config.path).expanduser()
    if not path.is_absolute():
        path = base_dir / path

    if config.backend == "sqlite":
        path.parent.mkdir(parents=True, exist_ok=True)
        return SqliteKeyValueStore(f"sqlite+aiosqlite:///{path}")

    return JsonFileStore(path)
