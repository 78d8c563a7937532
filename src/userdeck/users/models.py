"""User model and search scope.

A User has one canonical shape throughout the package. Remote records with
alternative field layouts are normalized before they reach this module
(see userdeck.sources.records).
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

PLACEHOLDER_AVATAR = "https://via.placeholder.com/40"


class SearchScope(str, Enum):
    """Which users a search filters."""

    CURRENT_PAGE = "page"
    ALL = "all"


@dataclass(slots=True)
class User:
    """A user record.

    Instances are mutable: editing a user changes it in place, whichever
    subset (origin or added) it belongs to.

    Attributes:
        id: Identifier, unique within the combined user set.
        first_name: Given name.
        last_name: Family name, may be empty.
        email: Email address.
        avatar: Avatar URL or the placeholder reference.
    """

    id: int
    first_name: str
    last_name: str = ""
    email: str = ""
    avatar: str = PLACEHOLDER_AVATAR

    @property
    def full_name(self) -> str:
        """First and last name joined by a space, trimmed."""
        return f"{self.first_name} {self.last_name}".strip()

    def matches(self, query: str) -> bool:
        """Case-insensitive prefix match on full name or email.

        An empty query matches every user.
        """
        if not query:
            return True
        needle = query.lower()
        return self.full_name.lower().startswith(needle) or (
            bool(self.email) and self.email.lower().startswith(needle)
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the storage/remote record shape."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Rebuild a user from its serialized record.

        Raises:
            KeyError: If id is missing.
            ValueError: If id is not an integer.
        """
        return cls(
            id=int(data["id"]),
            first_name=str(data.get("first_name") or ""),
            last_name=str(data.get("last_name") or ""),
            email=str(data.get("email") or ""),
            avatar=str(data.get("avatar") or PLACEHOLDER_AVATAR),
        )


def split_full_name(name: str) -> tuple[str, str]:
    """Split a single "name" form field into first and last name.

    The first whitespace-separated token is the first name; the remaining
    tokens, joined by one space, are the last name.

    Example:
        >>> split_full_name("  Ada King Lovelace ")
        ('Ada', 'King Lovelace')
    """
    parts = name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])
