"""Users command group for UserDeck.

List, search and interactively browse the user directory.
"""

from typing import Annotated

import typer

from userdeck.cli.browse import UserBrowser
from userdeck.cli.formatters.panels import print_error
from userdeck.cli.formatters.tables import create_user_table, print_table
from userdeck.cli.runtime import load_runtime_config, start_store
from userdeck.core.errors import ValidationError
from userdeck.core.security import MAX_QUERY_LENGTH
from userdeck.users.models import SearchScope

app = typer.Typer(
    name="users",
    help="List, search and browse users.",
    no_args_is_help=True,
)


@app.command("list")
def list_users(
    page: Annotated[
        int,
        typer.Option("--page", "-p", min=1, help="Page number to show (1-based)."),
    ] = 1,
    page_size: Annotated[
        int | None,
        typer.Option("--page-size", min=1, help="Users per page. Defaults to the configured size."),
    ] = None,
) -> None:
    """Show one page of users."""
    config = load_runtime_config()
    store = start_store(config)

    pages = max(store.page_count(page_size), 1)
    print_table(
        create_user_table(
            store.get_page(page, page_size),
            title="Users",
            caption=f"Page {page} of {pages}",
        )
    )


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Name or email prefix (case-insensitive).")],
    all_users: Annotated[
        bool,
        typer.Option("--all", "-a", help="Search every user instead of one page."),
    ] = False,
    page: Annotated[
        int,
        typer.Option("--page", "-p", min=1, help="Page to search when --all is not given."),
    ] = 1,
) -> None:
    """Search users by name or email prefix."""
    if len(query) > MAX_QUERY_LENGTH:
        print_error(f"Search query exceeds {MAX_QUERY_LENGTH} characters")
        raise typer.Exit(1)

    config = load_runtime_config()
    store = start_store(config)

    if all_users:
        scope = SearchScope.ALL
        title = "Search results"
    else:
        scope = SearchScope.CURRENT_PAGE
        store.current_page = page
        title = f"Search results (page {page})"

    print_table(create_user_table(store.search(query, scope), title=title))


@app.command()
def browse() -> None:
    """Browse users interactively.

    Page through users, search, and add, edit or delete them. Changes last
    until you quit. Type h at the prompt for the list of commands.
    """
    config = load_runtime_config()
    store = start_store(config)
    try:
        UserBrowser(store).run()
    except ValidationError as e:
        print_error(e.message)
        raise typer.Exit(1) from e


__all__ = ["app"]
