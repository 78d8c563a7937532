"""userdeck persistence module - key-value storage for the origin user set."""

from userdeck.persistence.adapter import DEFAULT_STORAGE_KEY, PersistenceAdapter
from userdeck.persistence.schema import kv_entries_table, metadata
from userdeck.persistence.storage import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    SqliteKeyValueStore,
    create_store,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "PersistenceAdapter",
    "SqliteKeyValueStore",
    "create_store",
    "kv_entries_table",
    "metadata",
]
