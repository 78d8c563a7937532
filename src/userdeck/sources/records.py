"""Pydantic models for remote user pages.

The remote source does not always send the same record shape: most records
carry ``first_name``/``last_name``, some carry a single ``name``. Both are
normalized here so the rest of the package only ever sees userdeck.users.User.
"""

from typing import Any

from pydantic import BaseModel, model_validator

from userdeck.users.models import PLACEHOLDER_AVATAR, User, split_full_name


class RemoteUserRecord(BaseModel, frozen=True):
    """One user record as served by the remote API.

    Attributes:
        id: User identifier.
        first_name: Given name (derived from ``name`` when absent).
        last_name: Family name (derived from ``name`` when absent).
        email: Email address, empty when missing.
        avatar: Avatar URL, None when missing.
    """

    id: int
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    avatar: str | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_names(cls, data: Any) -> Any:
        """Drop null text fields and fill first/last name from ``name``."""
        if not isinstance(data, dict):
            return data
        normalized = {
            key: value
            for key, value in data.items()
            if not (value is None and key in ("first_name", "last_name", "email"))
        }
        if not normalized.get("first_name") and normalized.get("name"):
            first, last = split_full_name(str(normalized["name"]))
            normalized["first_name"] = first
            if not normalized.get("last_name"):
                normalized["last_name"] = last
        return normalized

    def to_user(self, placeholder_avatar: str = PLACEHOLDER_AVATAR) -> User:
        """Convert to the canonical User shape."""
        return User(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            avatar=self.avatar or placeholder_avatar,
        )


class RemoteUserPage(BaseModel, frozen=True):
    """A page of users as returned by ``GET /users?page=N``.

    Only ``data`` is required; pagination metadata is kept when present.
    """

    data: list[RemoteUserRecord]
    page: int | None = None
    per_page: int | None = None
    total: int | None = None
    total_pages: int | None = None

    def to_users(self, placeholder_avatar: str = PLACEHOLDER_AVATAR) -> list[User]:
        """Convert every record to a User, preserving order."""
        return [record.to_user(placeholder_avatar) for record in self.data]
