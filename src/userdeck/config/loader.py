"""Configuration loading and management for userdeck.

Functions:
    load_config: Load configuration from <config dir>/config.yaml
    load_config_or_default: Same, falling back to defaults when absent
    create_default_config: Write the default configuration file
    ensure_config_dir: Ensure the config directory and subdirectories exist
    apply_env_overrides: Apply USERDECK_* environment variables
"""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError
import yaml

from userdeck.config.models import UserDeckConfig, get_config_dir, get_default_config
from userdeck.core.errors import ConfigError

CONFIG_FILENAME = "config.yaml"


def load_env_files() -> None:
    """Load .env from the working directory and from the config directory.

    Values already present in the environment are not overridden.
    """
    load_dotenv()
    load_dotenv(get_config_dir() / ".env")


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure the configuration directory exists.

    Creates the directory with ``data`` and ``logs`` subdirectories.

    Returns:
        Path to the configuration directory.
    """
    if config_dir is None:
        config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "data").mkdir(exist_ok=True)
    (config_dir / "logs").mkdir(exist_ok=True)
    return config_dir


def create_default_config(
    config_dir: Path | None = None,
    *,
    overwrite: bool = False,
) -> Path:
    """Write config.yaml with default values.

    Args:
        config_dir: Directory to create the file in. Defaults to the config dir.
        overwrite: If True, replace an existing file.

    Returns:
        Path to the written config file.

    Raises:
        ConfigError: If the file exists and overwrite is False.
    """
    config_dir = ensure_config_dir(config_dir)
    config_path = config_dir / CONFIG_FILENAME

    if config_path.exists() and not overwrite:
        raise ConfigError(
            f"Configuration file already exists: {config_path}",
            config_file=str(config_path),
        )

    with config_path.open("w") as f:
        yaml.dump(
            get_default_config().model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

    return config_path


def _format_validation_errors(error: PydanticValidationError) -> str:
    lines = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"])
        lines.append(f"  - {loc}: {item['msg']}")
    return "\n".join(lines)


def load_config(config_path: Path | None = None) -> UserDeckConfig:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to config file. Defaults to <config dir>/config.yaml.

    Returns:
        Validated UserDeckConfig instance.

    Raises:
        ConfigError: If the file doesn't exist, is malformed, or fails validation.
    """
    if config_path is None:
        config_path = get_config_dir() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}. "
            "Run `userdeck config init` to create default configuration.",
            config_file=str(config_path),
        )

    try:
        with config_path.open() as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse configuration file: {e}",
            config_file=str(config_path),
            details={"yaml_error": str(e)},
        ) from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ConfigError(
            "Configuration file must contain a mapping",
            config_file=str(config_path),
        )

    try:
        return UserDeckConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        raise ConfigError(
            "Configuration validation failed:\n" + _format_validation_errors(e),
            config_file=str(config_path),
            details={"validation_errors": e.errors()},
        ) from e


def load_config_or_default(config_path: Path | None = None) -> UserDeckConfig:
    """Load configuration, returning defaults when no file exists.

    A file that exists but is invalid still raises ConfigError.
    """
    if config_path is None:
        config_path = get_config_dir() / CONFIG_FILENAME
    if not config_path.exists():
        return get_default_config()
    return load_config(config_path)


def apply_env_overrides(config: UserDeckConfig) -> UserDeckConfig:
    """Apply environment variable overrides.

    Priority (highest first):
        1. USERDECK_API_KEY / USERDECK_BASE_URL / USERDECK_LOG_MODE
        2. config.yaml values

    Returns:
        A new validated config with overrides applied.

    Raises:
        ConfigError: If an override produces an invalid configuration.
    """
    remote_updates: dict[str, Any] = {}
    logging_updates: dict[str, Any] = {}

    api_key = os.environ.get("USERDECK_API_KEY", "").strip()
    if api_key:
        remote_updates["api_key"] = api_key
    base_url = os.environ.get("USERDECK_BASE_URL", "").strip()
    if base_url:
        remote_updates["base_url"] = base_url
    log_mode = os.environ.get("USERDECK_LOG_MODE", "").strip().lower()
    if log_mode:
        logging_updates["mode"] = log_mode

    if not remote_updates and not logging_updates:
        return config

    data = config.model_dump()
    data["remote"].update(remote_updates)
    data["logging"].update(logging_updates)
    try:
        return UserDeckConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(
            "Environment override produced an invalid configuration:\n"
            + _format_validation_errors(e),
            details={"validation_errors": e.errors()},
        ) from e


def config_exists() -> bool:
    """Check whether config.yaml exists in the config directory."""
    return (get_config_dir() / CONFIG_FILENAME).exists()
