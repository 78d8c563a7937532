"""Unit tests for userdeck.cli.browse module."""

import pytest
import structlog

from userdeck.cli.browse import Action, BrowseCommand, UserBrowser, parse_command
from userdeck.core.errors import NotFoundError, ValidationError
from userdeck.users.models import User
from userdeck.users.store import UserStore


class TestParseCommand:
    """Test parse_command."""

    @pytest.mark.parametrize(
        ("line", "action"),
        [("n", Action.NEXT), (" P ", Action.PREV), ("a", Action.ADD), ("q", Action.QUIT)],
    )
    def test_simple_commands(self, line: str, action: Action) -> None:
        assert parse_command(line) == BrowseCommand(action)

    def test_edit_with_id(self) -> None:
        assert parse_command("e 7") == BrowseCommand(Action.EDIT, user_id=7)

    def test_delete_with_id(self) -> None:
        assert parse_command("d  13") == BrowseCommand(Action.DELETE, user_id=13)

    @pytest.mark.parametrize("line", ["e", "d abc", "e 1.5", "e ²", "d --5"])
    def test_id_required(self, line: str) -> None:
        with pytest.raises(ValidationError):
            parse_command(line)

    def test_search_keeps_inner_spaces(self) -> None:
        assert parse_command("s janet w") == BrowseCommand(Action.SEARCH, query="janet w")

    def test_empty_search(self) -> None:
        assert parse_command("s") == BrowseCommand(Action.SEARCH, query="")

    def test_search_all(self) -> None:
        assert parse_command("sa ada") == BrowseCommand(Action.SEARCH_ALL, query="ada")

    def test_query_too_long(self) -> None:
        with pytest.raises(ValidationError):
            parse_command("s " + "x" * 201)

    def test_unknown(self) -> None:
        with pytest.raises(ValidationError, match="Unknown command"):
            parse_command("zap")


class TestUserBrowserHandle:
    """Test UserBrowser.handle without prompts."""

    @pytest.fixture
    def browser(self, twelve_users: list[User]) -> UserBrowser:
        store = UserStore()
        store.initialize(twelve_users)
        return UserBrowser(store)

    def test_quit_stops(self, browser: UserBrowser) -> None:
        assert browser.handle(BrowseCommand(Action.QUIT)) is False

    def test_next_page(self, browser: UserBrowser) -> None:
        assert browser.handle(BrowseCommand(Action.NEXT)) is True
        assert browser.store.current_page == 2

    def test_edit_unknown_raises(self, browser: UserBrowser) -> None:
        with pytest.raises(NotFoundError):
            browser.handle(BrowseCommand(Action.EDIT, user_id=99))

    def test_delete_unknown_raises(self, browser: UserBrowser) -> None:
        with pytest.raises(NotFoundError):
            browser.handle(BrowseCommand(Action.DELETE, user_id=99))

    @pytest.mark.parametrize("action", [Action.EDIT, Action.DELETE])
    def test_missing_id_raises(self, browser: UserBrowser, action: Action) -> None:
        with pytest.raises(ValidationError) as exc_info:
            browser.handle(BrowseCommand(action))
        assert exc_info.value.field == "user_id"

    def test_run_binds_view_only_while_browsing(
        self, browser: UserBrowser, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen: list[dict[str, object]] = []

        def fake_ask(*args: object, **kwargs: object) -> str:
            seen.append(structlog.contextvars.get_contextvars())
            return "q"

        monkeypatch.setattr("userdeck.cli.browse.Prompt.ask", fake_ask)
        browser.run()
        assert seen[0]["view"] == "browse"
        assert "view" not in structlog.contextvars.get_contextvars()
