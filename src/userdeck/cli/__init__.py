"""UserDeck CLI module.

This module provides the command-line interface for UserDeck,
built with Typer for the CLI framework and Rich for output.
"""

from userdeck.cli.main import app

__all__ = ["app"]
