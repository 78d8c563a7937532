"""Interactive user browser.

Shows the current page of users and reads one-line commands:

    n            next page
    p            previous page
    a            add a user
    e ID         edit a user
    d ID         delete a user (asks for confirmation)
    s [QUERY]    search the current page (empty query restores the page)
    sa [QUERY]   search all users
    r            redraw the current page
    h            help
    q            quit

All changes live in memory for the rest of the session only.
"""

from dataclasses import dataclass
from enum import Enum
import re

from rich.prompt import Confirm, Prompt

from userdeck.cli.formatters import console
from userdeck.cli.formatters.panels import print_error, print_info, print_success
from userdeck.cli.formatters.tables import create_user_table, print_table
from userdeck.core.errors import NotFoundError, ValidationError
from userdeck.core.security import MAX_QUERY_LENGTH
from userdeck.observability.logging import bind_context, unbind_context
from userdeck.users.models import SearchScope
from userdeck.users.store import UserStore


class Action(str, Enum):
    NEXT = "n"
    PREV = "p"
    ADD = "a"
    EDIT = "e"
    DELETE = "d"
    SEARCH = "s"
    SEARCH_ALL = "sa"
    REFRESH = "r"
    HELP = "h"
    QUIT = "q"


_NEEDS_ID = frozenset({Action.EDIT, Action.DELETE})
_USER_ID = re.compile(r"-?[0-9]+")

HELP_TEXT = (
    "n: next page   p: previous page   a: add   e ID: edit   d ID: delete\n"
    "s QUERY: search page   sa QUERY: search all   r: redraw   q: quit"
)


@dataclass(frozen=True, slots=True)
class BrowseCommand:
    """A parsed browse command.

    Attributes:
        action: What to do.
        user_id: Target user for edit/delete.
        query: Search text for search commands.
    """

    action: Action
    user_id: int | None = None
    query: str = ""


def parse_command(line: str) -> BrowseCommand:
    """Parse one line of browse input.

    Raises:
        ValidationError: On an unknown command, a missing or non-numeric id,
            or an over-long query.
    """
    stripped = line.strip()
    verb, _, rest = stripped.partition(" ")
    try:
        action = Action(verb.lower())
    except ValueError as e:
        raise ValidationError(
            f"Unknown command {verb!r}. Type h for help.", field="command", value=verb
        ) from e

    if action in _NEEDS_ID:
        arg = rest.strip()
        if not _USER_ID.fullmatch(arg):
            raise ValidationError(
                f"Command {action.value!r} needs a numeric user id",
                field="user_id",
                value=arg,
            )
        return BrowseCommand(action, user_id=int(arg))

    if action in (Action.SEARCH, Action.SEARCH_ALL):
        query = rest.lstrip()
        if len(query) > MAX_QUERY_LENGTH:
            raise ValidationError(
                f"Search query exceeds {MAX_QUERY_LENGTH} characters", field="query", value=query
            )
        return BrowseCommand(action, query=query)

    return BrowseCommand(action)


def _require_user_id(command: BrowseCommand) -> int:
    if command.user_id is None:
        raise ValidationError(
            f"Command {command.action.value!r} needs a numeric user id", field="user_id"
        )
    return command.user_id


class UserBrowser:
    """Drives a UserStore from interactive commands."""

    def __init__(self, store: UserStore) -> None:
        self.store = store

    def render_page(self) -> None:
        """Show the current page with its position."""
        pages = max(self.store.page_count(), 1)
        print_table(
            create_user_table(
                self.store.current_page_users(),
                title="Users",
                caption=f"Page {self.store.current_page} of {pages}",
            )
        )

    def _search(self, query: str, scope: SearchScope) -> None:
        if not query and scope == SearchScope.CURRENT_PAGE:
            self.render_page()
            return
        results = self.store.search(query, scope)
        title = "Search results" if scope == SearchScope.ALL else "Search results (this page)"
        print_table(create_user_table(results, title=title))

    def _add(self) -> None:
        self.store.open_add()
        name = Prompt.ask("Name", console=console)
        email = Prompt.ask("Email", console=console)
        user = self.store.submit_form(name, email)
        print_success(f'New user "{user.full_name}" added successfully!')
        self.render_page()

    def _edit(self, user_id: int) -> None:
        user = self.store.open_edit(user_id)
        name = Prompt.ask("Name", default=user.full_name, console=console)
        email = Prompt.ask("Email", default=user.email, console=console)
        try:
            self.store.submit_form(name, email)
        finally:
            self.store.editing_id = None
        print_success("User updated successfully!")
        self.render_page()

    def _delete(self, user_id: int) -> None:
        self.store.get_user(user_id)
        if not Confirm.ask(
            f"Are you sure you want to delete user ID {user_id}?", console=console
        ):
            return
        self.store.delete_user(user_id)
        print_success(f"User with ID {user_id} deleted successfully!")
        self.render_page()

    def handle(self, command: BrowseCommand) -> bool:
        """Execute one command.

        Returns:
            False when the browser should stop.

        Raises:
            ValidationError: If a form was submitted with missing fields.
            NotFoundError: If the command targets an unknown user id.
        """
        match command.action:
            case Action.QUIT:
                return False
            case Action.NEXT:
                if self.store.next_page():
                    self.render_page()
                else:
                    print_info("Already on the last page.")
            case Action.PREV:
                if self.store.prev_page():
                    self.render_page()
                else:
                    print_info("Already on the first page.")
            case Action.ADD:
                self._add()
            case Action.EDIT:
                self._edit(_require_user_id(command))
            case Action.DELETE:
                self._delete(_require_user_id(command))
            case Action.SEARCH:
                self._search(command.query, SearchScope.CURRENT_PAGE)
            case Action.SEARCH_ALL:
                self._search(command.query, SearchScope.ALL)
            case Action.REFRESH:
                self.render_page()
            case Action.HELP:
                print_info(HELP_TEXT, title="Commands")
        return True

    def run(self) -> None:
        """Read and execute commands until quit or end of input."""
        bind_context(view="browse")
        try:
            self._loop()
        finally:
            unbind_context("view")

    def _loop(self) -> None:
        self.render_page()
        while True:
            try:
                line = Prompt.ask("[highlight]userdeck[/]", console=console)
            except EOFError:
                break
            if not line.strip():
                continue
            try:
                if not self.handle(parse_command(line)):
                    break
            except (ValidationError, NotFoundError) as e:
                print_error(e.message)
            except EOFError:
                break
