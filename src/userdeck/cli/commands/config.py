"""Config command group for UserDeck.

Create and inspect the configuration file.
"""

from typing import Annotated, Any

import typer

from userdeck.cli.formatters.panels import print_error, print_success
from userdeck.cli.formatters.tables import create_key_value_table, print_table
from userdeck.config.loader import (
    CONFIG_FILENAME,
    apply_env_overrides,
    config_exists,
    create_default_config,
    load_config_or_default,
    load_env_files,
)
from userdeck.config.models import get_config_dir
from userdeck.core.errors import ConfigError
from userdeck.core.security import sanitize_for_logging

app = typer.Typer(
    name="config",
    help="Manage UserDeck configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Create a default config file in the UserDeck home directory."""
    try:
        path = create_default_config(overwrite=force)
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e
    print_success(f"Configuration written to {path}")


@app.command()
def show() -> None:
    """Display the effective configuration.

    Environment overrides are applied and secrets are masked.
    """
    load_env_files()
    try:
        config = apply_env_overrides(load_config_or_default())
    except ConfigError as e:
        print_error(e.message, title="Configuration Error")
        raise typer.Exit(1) from e

    config_file = get_config_dir() / CONFIG_FILENAME
    data: dict[str, Any] = {
        "config_file": config_file if config_exists() else f"{config_file} (not found, defaults)"
    }
    for section, values in sanitize_for_logging(config.model_dump()).items():
        for key, value in values.items():
            data[f"{section}.{key}"] = value
    print_table(create_key_value_table(data, "Current Configuration"))


__all__ = ["app"]
