"""UserDeck CLI main entry point.

This module defines the main Typer application and registers
all command groups for the UserDeck CLI.
"""

from typing import Annotated

import typer

from userdeck import __version__
from userdeck.cli.commands import cache, config, users
from userdeck.cli.formatters import console

app = typer.Typer(
    name="userdeck",
    help="UserDeck - Paginated user directory",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(users.app, name="users")
app.add_typer(cache.app, name="cache")
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]UserDeck[/] version [green]{__version__}[/]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """UserDeck - Paginated user directory.

    Users are fetched once from the remote directory and cached locally.
    Users you add, edit or delete while browsing last for that session.

    Use [bold cyan]userdeck COMMAND --help[/] for command-specific help.
    """


__all__ = ["app", "main"]
