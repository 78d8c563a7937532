"""Persistence of the origin user set.

The origin set is serialized as a JSON list of user records and kept under a
single fixed key. It is written once, after the first successful remote
fetch, and read once at session start. There is no schema versioning.
"""

import json

import structlog

from userdeck.core.errors import PersistenceError
from userdeck.persistence.storage import KeyValueStore
from userdeck.users.models import User

log = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "originalUsers"


class PersistenceAdapter:
    """Reads and writes the origin user set in a KeyValueStore.

    Args:
        store: Initialized key-value store.
        key: Storage key for the serialized origin set.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def load_origin(self) -> list[User] | None:
        """Read the cached origin set.

        Returns:
            The cached users in stored order, or None if nothing is stored.

        Raises:
            PersistenceError: If the stored blob is not a JSON list of user
                records, or the backend fails.
        """
        raw = await self._store.get(self._key)
        if raw is None:
            log.debug("persistence.origin.missing", storage_key=self._key)
            return None

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                f"Cached users are not valid JSON: {e}",
                operation="decode",
                key=self._key,
            ) from e

        if not isinstance(records, list):
            raise PersistenceError(
                "Cached users must be a JSON list",
                operation="decode",
                key=self._key,
                details={"type": type(records).__name__},
            )

        try:
            users = [User.from_dict(record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(
                f"Cached user record is malformed: {e}",
                operation="decode",
                key=self._key,
            ) from e

        log.debug("persistence.origin.loaded", storage_key=self._key, user_count=len(users))
        return users

    async def save_origin(self, users: list[User]) -> None:
        """Write the origin set, replacing whatever was stored.

        Raises:
            PersistenceError: If the backend fails.
        """
        payload = json.dumps([user.to_dict() for user in users], ensure_ascii=False)
        await self._store.set(self._key, payload)
        log.info("persistence.origin.saved", storage_key=self._key, user_count=len(users))

    async def clear(self) -> None:
        """Remove the cached origin set so the next session fetches again."""
        await self._store.delete(self._key)
        log.info("persistence.origin.cleared", storage_key=self._key)
