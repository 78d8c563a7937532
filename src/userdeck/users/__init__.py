"""Users module - the canonical User model and the in-memory UserStore."""

from userdeck.users.models import PLACEHOLDER_AVATAR, SearchScope, User, split_full_name
from userdeck.users.store import DEFAULT_FIRST_ADDED_ID, DEFAULT_PAGE_SIZE, UserStore

__all__ = [
    "DEFAULT_FIRST_ADDED_ID",
    "DEFAULT_PAGE_SIZE",
    "PLACEHOLDER_AVATAR",
    "SearchScope",
    "User",
    "UserStore",
    "split_full_name",
]
