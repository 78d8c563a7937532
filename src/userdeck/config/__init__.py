"""Configuration module for userdeck.

Configuration is stored in ~/.userdeck/config.yaml (or $USERDECK_HOME).

Usage:
    from userdeck.config import apply_env_overrides, load_config_or_default

    config = apply_env_overrides(load_config_or_default())
    page_size = config.store.page_size
"""

from userdeck.config.loader import (
    apply_env_overrides,
    config_exists,
    create_default_config,
    ensure_config_dir,
    load_config,
    load_config_or_default,
    load_env_files,
)
from userdeck.config.models import (
    LoggingConfig,
    RemoteConfig,
    StorageConfig,
    StoreConfig,
    UserDeckConfig,
    get_config_dir,
    get_default_config,
)

__all__ = [
    # Models
    "UserDeckConfig",
    "RemoteConfig",
    "StorageConfig",
    "StoreConfig",
    "LoggingConfig",
    # Loader functions
    "load_config",
    "load_config_or_default",
    "load_env_files",
    "apply_env_overrides",
    "create_default_config",
    "ensure_config_dir",
    "config_exists",
    # Model helpers
    "get_config_dir",
    "get_default_config",
]
