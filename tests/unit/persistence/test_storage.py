"""Unit tests for userdeck.persistence.storage module."""

from collections.abc import AsyncIterator
import json
from pathlib import Path

import pytest

from userdeck.config.models import StorageConfig
from userdeck.core.errors import PersistenceError
from userdeck.persistence.storage import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    SqliteKeyValueStore,
    create_store,
)


@pytest.fixture(params=["json", "sqlite", "memory"])
async def kv_store(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncIterator[KeyValueStore]:
    """Each backend, initialized and closed around the test."""
    store: KeyValueStore
    if request.param == "json":
        store = JsonFileStore(tmp_path / "data" / "storage.json")
    elif request.param == "sqlite":
        store = SqliteKeyValueStore(f"sqlite+aiosqlite:///{tmp_path / 'storage.db'}")
    else:
        store = InMemoryStore()
    await store.initialize()
    yield store
    await store.close()


class TestKeyValueContract:
    """Behavior shared by every backend."""

    async def test_missing_key_is_none(self, kv_store: KeyValueStore) -> None:
        assert await kv_store.get("originalUsers") is None

    async def test_set_then_get(self, kv_store: KeyValueStore) -> None:
        await kv_store.set("originalUsers", '[{"id": 1}]')
        assert await kv_store.get("originalUsers") == '[{"id": 1}]'

    async def test_set_overwrites(self, kv_store: KeyValueStore) -> None:
        await kv_store.set("k", "one")
        await kv_store.set("k", "two")
        assert await kv_store.get("k") == "two"

    async def test_delete(self, kv_store: KeyValueStore) -> None:
        await kv_store.set("k", "v")
        await kv_store.delete("k")
        assert await kv_store.get("k") is None

    async def test_delete_missing_is_noop(self, kv_store: KeyValueStore) -> None:
        await kv_store.delete("never-set")

    async def test_keys_are_independent(self, kv_store: KeyValueStore) -> None:
        await kv_store.set("a", "1")
        await kv_store.set("b", "2")
        await kv_store.delete("a")
        assert await kv_store.get("b") == "2"


class TestJsonFileStore:
    """JSON file specifics."""

    async def test_survives_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        await JsonFileStore(path).set("k", "v")
        assert await JsonFileStore(path).get("k") == "v"

    async def test_file_is_json_object(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        await JsonFileStore(path).set("originalUsers", "[]")
        assert json.loads(path.read_text()) == {"originalUsers": "[]"}
        assert not path.with_suffix(".json.tmp").exists()

    async def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError) as exc_info:
            await JsonFileStore(path).get("k")
        assert exc_info.value.operation == "read"

    async def test_undecodable_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        path.write_bytes(b'{"originalUsers": "\xff\xfe"}')
        with pytest.raises(PersistenceError) as exc_info:
            await JsonFileStore(path).get("originalUsers")
        assert exc_info.value.operation == "read"

    async def test_non_object_file(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        path.write_text("[1, 2]")
        with pytest.raises(PersistenceError):
            await JsonFileStore(path).get("k")

    async def test_non_string_value(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        path.write_text('{"k": 5}')
        with pytest.raises(PersistenceError):
            await JsonFileStore(path).get("k")


class TestSqliteKeyValueStore:
    """SQLite specifics."""

    async def test_requires_initialize(self, tmp_path: Path) -> None:
        store = SqliteKeyValueStore(f"sqlite+aiosqlite:///{tmp_path / 'x.db'}")
        with pytest.raises(PersistenceError, match="not initialized"):
            await store.get("k")

    async def test_survives_reopen(self, tmp_path: Path) -> None:
        url = f"sqlite+aiosqlite:///{tmp_path / 'x.db'}"
        first = SqliteKeyValueStore(url)
        await first.initialize()
        await first.set("k", "v")
        await first.close()

        second = SqliteKeyValueStore(url)
        await second.initialize()
        try:
            assert await second.get("k") == "v"
        finally:
            await second.close()

    async def test_close_is_idempotent(self, tmp_path: Path) -> None:
        store = SqliteKeyValueStore(f"sqlite+aiosqlite:///{tmp_path / 'x.db'}")
        await store.initialize()
        await store.close()
        await store.close()


class TestCreateStore:
    """Test backend selection."""

    def test_json_default_relative_to_config_dir(self, tmp_path: Path) -> None:
        store = create_store(StorageConfig(), tmp_path)
        assert isinstance(store, JsonFileStore)
        assert store.path == tmp_path / "data" / "storage.json"

    def test_absolute_path_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "elsewhere.json"
        store = create_store(StorageConfig(path=str(path)), Path("/unused"))
        assert isinstance(store, JsonFileStore)
        assert store.path == path

    def test_sqlite(self, tmp_path: Path) -> None:
        store = create_store(StorageConfig(backend="sqlite", path="data/users.db"), tmp_path)
        assert isinstance(store, SqliteKeyValueStore)

    def test_memory(self, tmp_path: Path) -> None:
        assert isinstance(create_store(StorageConfig(backend="memory"), tmp_path), InMemoryStore)

    def test_defaults_to_config_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USERDECK_HOME", str(tmp_path))
        store = create_store(StorageConfig())
        assert isinstance(store, JsonFileStore)
        assert store.path == tmp_path / "data" / "storage.json"
