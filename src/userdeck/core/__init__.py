"""userdeck core module - shared errors and security helpers."""

from userdeck.core.errors import (
    ConfigError,
    FetchTimeoutError,
    NotFoundError,
    PersistenceError,
    RemoteFetchError,
    UserDeckError,
    ValidationError,
)
from userdeck.core.security import (
    mask_api_key,
    sanitize_for_logging,
)

__all__ = [
    # Errors
    "UserDeckError",
    "RemoteFetchError",
    "FetchTimeoutError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "ConfigError",
    # Security utilities
    "mask_api_key",
    "sanitize_for_logging",
]
