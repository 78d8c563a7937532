"""Rich tables for users and key-value data.

create_user_table is the renderer of the user screen: it maps a page of
users to rows of id, avatar, name and email.
"""

from collections.abc import Sequence
from typing import Any

from rich.markup import escape
from rich.table import Table

from userdeck.cli.formatters import console
from userdeck.users.models import User


def create_table(
    title: str | None = None,
    *,
    show_header: bool = True,
    border_style: str = "blue",
    header_style: str = "bold cyan",
) -> Table:
    """Create a Rich Table with consistent styling."""
    return Table(
        title=title,
        show_header=show_header,
        border_style=border_style,
        header_style=header_style,
        row_styles=["", "dim"],
    )


def user_row(user: User) -> tuple[str, str, str, str]:
    """Render one user as table cells: id, avatar, name, email.

    A missing email is shown as "-".
    """
    return (
        str(user.id),
        escape(user.avatar),
        escape(user.full_name),
        escape(user.email) if user.email else "-",
    )


def create_user_table(
    users: Sequence[User],
    title: str | None = None,
    *,
    caption: str | None = None,
) -> Table:
    """Create the user table.

    Args:
        users: Users to show, in display order.
        title: Optional table title.
        caption: Optional caption, e.g. "Page 1 of 2".

    Returns:
        Rich Table with one row per user.
    """
    table = create_table(title)
    table.caption = caption
    table.add_column("ID", style="cyan", justify="right", no_wrap=True)
    table.add_column("Avatar", style="muted", overflow="fold")
    table.add_column("Name")
    table.add_column("Email", style="highlight")

    for user in users:
        table.add_row(*user_row(user))

    if not users:
        table.add_row("", "", "[muted]No users[/]", "")

    return table


def create_key_value_table(
    data: dict[str, Any],
    title: str | None = None,
) -> Table:
    """Create a two-column table for key-value data."""
    table = create_table(title, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(str(key), escape(str(value)))

    return table


def print_table(table: Table) -> None:
    console.print(table)


__all__ = [
    "create_table",
    "create_user_table",
    "create_key_value_table",
    "print_table",
    "user_row",
]
