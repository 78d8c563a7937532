"""UserDeck - Paginated user directory.

Fetches a user directory from a remote JSON API once, caches it locally,
and lets you page, search and edit it from the terminal.

Example:
    # Using CLI
    userdeck users list --page 2
    userdeck users browse

    # Using Python
    from userdeck.users import UserStore
    from userdeck.session import open_session
"""

__version__ = "0.1.0"

__all__ = ["__version__", "main"]


def main() -> None:
    """Main entry point for the UserDeck CLI.

    This function invokes the Typer app from userdeck.cli.main.
    """
    from userdeck.cli.main import app

    app()
