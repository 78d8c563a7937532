"""Pydantic models for userdeck configuration.

All configuration validation happens through these models.

Classes:
    RemoteConfig: Remote user source settings
    StorageConfig: Key-value storage backend settings
    StoreConfig: Pagination and local id settings
    LoggingConfig: Logging settings
    UserDeckConfig: Top-level configuration combining all sections
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from userdeck.users.models import PLACEHOLDER_AVATAR


class RemoteConfig(BaseModel, frozen=True):
    """Remote user source configuration.

    Attributes:
        base_url: API root; pages are fetched from ``{base_url}/users?page=N``
        pages: Page numbers fetched at first start, in concatenation order
        timeout_seconds: Time allowed for the whole startup fetch
        api_key: Optional key sent as the ``x-api-key`` header
    """

    base_url: str = "https://reqres.in/api"
    pages: list[int] = Field(default_factory=lambda: [1, 2], min_length=1)
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    api_key: str | None = "reqres-free-v1"

    @field_validator("pages")
    @classmethod
    def validate_pages(cls, v: list[int]) -> list[int]:
        """Validate that every page number is positive."""
        if any(page < 1 for page in v):
            msg = f"Page numbers must be positive, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://, got {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")


class StorageConfig(BaseModel, frozen=True):
    """Durable storage configuration.

    Attributes:
        backend: json (single JSON file), sqlite, or memory (nothing on disk)
        path: Storage file path (relative to config dir)
        key: Key under which the origin user set is stored
    """

    backend: Literal["json", "sqlite", "memory"] = "json"
    path: str = "data/storage.json"
    key: str = Field(default="originalUsers", min_length=1)


class StoreConfig(BaseModel, frozen=True):
    """User store configuration.

    Attributes:
        page_size: Users per page
        first_added_id: Id given to the first locally added user
        placeholder_avatar: Avatar reference for users without one
    """

    page_size: int = Field(default=6, ge=1)
    first_added_id: int = Field(default=13, ge=1)
    placeholder_avatar: str = PLACEHOLDER_AVATAR


class LoggingConfig(BaseModel, frozen=True):
    """Logging configuration.

    Attributes:
        mode: dev (human-readable console) or prod (JSON)
        level: Minimum log level
        file_logging: Whether to also write JSON logs under <config dir>/logs
        max_log_days: Days of rotated log files to keep
    """

    mode: Literal["dev", "prod"] = "dev"
    level: Literal["debug", "info", "warning", "error"] = "warning"
    file_logging: bool = False
    max_log_days: int = Field(default=7, ge=1, le=365)


class UserDeckConfig(BaseModel, frozen=True):
    """Top-level userdeck configuration.

    Validates against config.yaml in the config directory.
    """

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_config() -> UserDeckConfig:
    """Get the default configuration."""
    return UserDeckConfig()


def get_config_dir() -> Path:
    """Get the userdeck configuration directory.

    Returns:
        $USERDECK_HOME if set, otherwise ~/.userdeck/
    """
    env_home = os.environ.get("USERDECK_HOME", "").strip()
    if env_home:
        return Path(env_home).expanduser()
    return Path.home() / ".userdeck"
