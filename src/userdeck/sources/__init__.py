"""Remote user sources.

RemoteUserSource fetches the origin user set over HTTP; the record models
normalize the remote payload into userdeck.users.User.
"""

from userdeck.sources.records import RemoteUserPage, RemoteUserRecord
from userdeck.sources.remote import (
    DEFAULT_BASE_URL,
    DEFAULT_PAGES,
    DEFAULT_TIMEOUT,
    RemoteUserSource,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_PAGES",
    "DEFAULT_TIMEOUT",
    "RemoteUserPage",
    "RemoteUserRecord",
    "RemoteUserSource",
]
