"""Cache command group for UserDeck.

Inspect or drop the locally cached user set.
"""

from typing import Annotated

import typer

from userdeck.cli.formatters.panels import print_info, print_success
from userdeck.cli.formatters.tables import create_key_value_table, print_table
from userdeck.cli.runtime import cached_count, clear_cache, load_runtime_config

app = typer.Typer(
    name="cache",
    help="Manage the local user cache.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show where users are cached and how many there are."""
    config = load_runtime_config()
    count = cached_count(config)

    data = {
        "backend": config.storage.backend,
        "path": config.storage.path,
        "key": config.storage.key,
        "cached users": "none" if count is None else count,
    }
    print_table(create_key_value_table(data, "User Cache"))


@app.command()
def clear(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Remove cached users so the next run fetches them again."""
    config = load_runtime_config()
    if not yes and not typer.confirm("Clear the cached users?"):
        print_info("Cache left unchanged.")
        raise typer.Exit()

    clear_cache(config)
    print_success("Cache cleared. Users will be fetched again on the next run.")


__all__ = ["app"]
