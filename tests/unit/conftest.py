"""Shared fixtures for userdeck unit tests."""

from collections.abc import Callable, Iterator

import pytest

from userdeck.observability.logging import reset_logging
from userdeck.users.models import User


def make_user(user_id: int, first: str = "", last: str = "", email: str = "") -> User:
    """Build a user with predictable fields derived from the id."""
    return User(
        id=user_id,
        first_name=first or f"First{user_id}",
        last_name=last or f"Last{user_id}",
        email=email or f"user{user_id}@example.com",
        avatar=f"https://example.com/avatars/{user_id}.png",
    )


@pytest.fixture
def user_factory() -> Callable[..., User]:
    return make_user


@pytest.fixture
def twelve_users() -> list[User]:
    """The usual remote origin set: ids 1..12."""
    return [make_user(i) for i in range(1, 13)]


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()
