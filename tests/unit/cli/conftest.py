"""Fixtures for CLI tests: an isolated home directory and a wide console."""

from collections.abc import Callable
import json
from pathlib import Path

import httpx
import pytest

from userdeck.cli import runtime
from userdeck.cli.formatters import console
from userdeck.config.models import UserDeckConfig
from userdeck.sources.remote import RemoteUserSource
from userdeck.users.models import User


@pytest.fixture(autouse=True)
def userdeck_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every CLI test against an empty USERDECK_HOME."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("USERDECK_HOME", str(home))
    for name in ("USERDECK_API_KEY", "USERDECK_BASE_URL", "USERDECK_LOG_MODE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(console, "width", 200)
    return home


@pytest.fixture
def seed_cache(userdeck_home: Path) -> Callable[[list[User]], Path]:
    """Write users into the default JSON storage file as the cached origin set."""

    def _seed(users: list[User]) -> Path:
        path = userdeck_home / "data" / "storage.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        blob = json.dumps([user.to_dict() for user in users])
        path.write_text(json.dumps({"originalUsers": blob}))
        return path

    return _seed


@pytest.fixture
def remote_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Serve two pages of six users from a mock transport; record requested URLs."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        page = int(request.url.params["page"])
        first = (page - 1) * 6 + 1
        data = [
            {
                "id": i,
                "email": f"remote{i}@reqres.in",
                "first_name": f"Remote{i}",
                "last_name": "User",
                "avatar": f"https://reqres.in/img/faces/{i}-image.jpg",
            }
            for i in range(first, first + 6)
        ]
        return httpx.Response(200, json={"page": page, "data": data})

    def build(config: UserDeckConfig) -> RemoteUserSource:
        return RemoteUserSource(
            config.remote.base_url,
            pages=config.remote.pages,
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(runtime, "build_source", build)
    return calls


@pytest.fixture
def failing_remote(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make every remote page answer 500."""

    def build(config: UserDeckConfig) -> RemoteUserSource:
        return RemoteUserSource(
            config.remote.base_url,
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

    monkeypatch.setattr(runtime, "build_source", build)
