"""In-memory user store.

UserStore keeps the users fetched from the remote source (the origin set)
apart from the users created locally (the added set). The visible list is
always ``origin + added``; pagination and search operate on that list.

Lookup precedence differs by operation and is intentional to keep:
    - get/edit search the origin set first, then the added set.
    - delete searches the added set first, then the origin set.

Usage:
    store = UserStore(page_size=6, first_added_id=13)
    if store.initialize(cached_users):
        store.adopt_remote(await source.fetch_all())

    page = store.get_page(1)
    ada = store.add_user("Ada", "Lovelace", "ada@example.com")
    store.edit_user(ada.id, "Ada", "King", "ada@example.com")
    store.delete_user(ada.id)
"""

from collections.abc import Iterable, Sequence

import structlog

from userdeck.core.errors import NotFoundError, ValidationError
from userdeck.core.security import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from userdeck.users.models import (
    PLACEHOLDER_AVATAR,
    SearchScope,
    User,
    split_full_name,
)

log = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 6
DEFAULT_FIRST_ADDED_ID = 13


def _clean_fields(first_name: str, last_name: str, email: str) -> tuple[str, str, str]:
    """Trim form fields and reject missing or oversized values.

    Raises:
        ValidationError: If first name or email is empty after trimming,
            or any field exceeds its length limit.
    """
    first = first_name.strip()
    last = last_name.strip()
    mail = email.strip()

    if not first:
        raise ValidationError("First name is required", field="first_name", value=first_name)
    if not mail:
        raise ValidationError("Email is required", field="email", value=email)

    for field, value, limit in (
        ("first_name", first, MAX_NAME_LENGTH),
        ("last_name", last, MAX_NAME_LENGTH),
        ("email", mail, MAX_EMAIL_LENGTH),
    ):
        if len(value) > limit:
            raise ValidationError(
                f"{field} exceeds {limit} characters",
                field=field,
                value=value,
            )

    return first, last, mail


class UserStore:
    """Origin and locally added users with pagination, search and mutation.

    Attributes:
        page_size: Default number of users per page.
        current_page: The page the view is showing (1-based).
        editing_id: Id of the user open in the edit form, None when the form
            is adding a new user.
    """

    def __init__(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        first_added_id: int = DEFAULT_FIRST_ADDED_ID,
        placeholder_avatar: str = PLACEHOLDER_AVATAR,
    ) -> None:
        if page_size < 1:
            msg = f"page_size must be positive, got {page_size}"
            raise ValueError(msg)
        self.page_size = page_size
        self._placeholder_avatar = placeholder_avatar
        self._origin: list[User] = []
        self._added: list[User] = []
        self._next_id = first_added_id
        self._needs_persist = False
        self.current_page = 1
        self.editing_id: int | None = None

    # ------------------------------------------------------------------
    # Loading

    def initialize(self, cached: Sequence[User] | None) -> bool:
        """Adopt a cached origin set.

        Args:
            cached: Origin users read from storage, or None if nothing is
                cached. An empty sequence counts as nothing cached.

        Returns:
            True if the caller must fetch the origin set remotely.
        """
        if not cached:
            return True

        self._origin = list(cached)
        self._added = []
        self.current_page = 1
        self._warn_on_id_overlap()
        log.debug("users.store.initialized", origin_count=len(self._origin))
        return False

    def adopt_remote(self, pages: Iterable[Sequence[User]]) -> list[User]:
        """Replace the origin set with fetched pages, concatenated in order.

        The origin set is marked for durable persistence.

        Returns:
            The new origin set.
        """
        self._origin = [user for page in pages for user in page]
        self._needs_persist = True
        self._warn_on_id_overlap()
        log.info("users.store.remote_adopted", origin_count=len(self._origin))
        return list(self._origin)

    @property
    def needs_persist(self) -> bool:
        """True while an adopted origin set has not been written to storage."""
        return self._needs_persist

    def mark_persisted(self) -> None:
        """Record that the origin set has been written to storage."""
        self._needs_persist = False

    def _warn_on_id_overlap(self) -> None:
        if not self._origin:
            return
        highest = max(user.id for user in self._origin)
        if highest >= self._next_id:
            log.warning(
                "users.id_collision_possible",
                highest_origin_id=highest,
                next_id=self._next_id,
            )

    # ------------------------------------------------------------------
    # Views

    @property
    def origin(self) -> list[User]:
        """Copy of the origin set."""
        return list(self._origin)

    @property
    def added(self) -> list[User]:
        """Copy of the locally added set."""
        return list(self._added)

    @property
    def users(self) -> list[User]:
        """The combined visible set: origin users followed by added users."""
        return [*self._origin, *self._added]

    @property
    def next_id(self) -> int:
        """Id the next added user will receive."""
        return self._next_id

    def __len__(self) -> int:
        return len(self._origin) + len(self._added)

    def get_page(self, page_number: int, page_size: int | None = None) -> list[User]:
        """Return one page of the combined set.

        Args:
            page_number: 1-based page number.
            page_size: Users per page. Defaults to the store's page size.

        Returns:
            The slice ``[(page_number - 1) * size, page_number * size)``.
            Page numbers or sizes below 1 and pages past the end give [].
        """
        size = self.page_size if page_size is None else page_size
        if page_number < 1 or size < 1:
            return []
        start = (page_number - 1) * size
        return self.users[start : start + size]

    def page_count(self, page_size: int | None = None) -> int:
        """Number of pages needed to show every user.

        Raises:
            ValidationError: If page_size is below 1.
        """
        size = self.page_size if page_size is None else page_size
        if size < 1:
            raise ValidationError("Page size must be positive", field="page_size", value=size)
        return -(-len(self) // size)

    def current_page_users(self) -> list[User]:
        """Users on the page the view is showing."""
        return self.get_page(self.current_page)

    def next_page(self) -> bool:
        """Advance to the next page if there is one.

        Returns:
            True if the current page changed.
        """
        if self.current_page < self.page_count():
            self.current_page += 1
            return True
        return False

    def prev_page(self) -> bool:
        """Go back one page if not on the first.

        Returns:
            True if the current page changed.
        """
        if self.current_page > 1:
            self.current_page -= 1
            return True
        return False

    def search(
        self,
        query: str,
        scope: SearchScope = SearchScope.CURRENT_PAGE,
    ) -> list[User]:
        """Filter users by case-insensitive prefix of full name or email.

        Args:
            query: Prefix to match. An empty query matches everything.
            scope: CURRENT_PAGE filters only the page the view is showing;
                ALL filters the combined set.

        Returns:
            Matching users in display order.
        """
        candidates = self.users if scope == SearchScope.ALL else self.current_page_users()
        return [user for user in candidates if user.matches(query)]

    # ------------------------------------------------------------------
    # Mutation

    def get_user(self, user_id: int) -> User:
        """Look up a user, origin set first.

        Raises:
            NotFoundError: If no user has this id.
        """
        for user in self._origin:
            if user.id == user_id:
                return user
        for user in self._added:
            if user.id == user_id:
                return user
        raise NotFoundError(f"No user with id {user_id}", user_id=user_id)

    def add_user(self, first_name: str, last_name: str, email: str) -> User:
        """Create a local user with the next id from the counter.

        Raises:
            ValidationError: If first name or email is empty after trimming.
        """
        first, last, mail = _clean_fields(first_name, last_name, email)
        user = User(
            id=self._next_id,
            first_name=first,
            last_name=last,
            email=mail,
            avatar=self._placeholder_avatar,
        )
        self._next_id += 1
        self._added.append(user)
        log.info("users.user.added", user_id=user.id)
        return user

    def edit_user(self, user_id: int, first_name: str, last_name: str, email: str) -> User:
        """Update a user's name and email in place.

        Raises:
            ValidationError: If first name or email is empty after trimming.
            NotFoundError: If no user has this id.
        """
        first, last, mail = _clean_fields(first_name, last_name, email)
        user = self.get_user(user_id)
        user.first_name = first
        user.last_name = last
        user.email = mail
        log.info("users.user.edited", user_id=user_id)
        return user

    def delete_user(self, user_id: int) -> User:
        """Remove a user, added set first.

        Raises:
            NotFoundError: If no user has this id.
        """
        removed = self._remove_from(self._added, user_id)
        if removed is None:
            removed = self._remove_from(self._origin, user_id)
        if removed is None:
            raise NotFoundError(f"No user with id {user_id}", user_id=user_id)

        if self.editing_id == user_id:
            self.editing_id = None
        self.current_page = max(1, min(self.current_page, self.page_count()))
        log.info("users.user.deleted", user_id=user_id)
        return removed

    @staticmethod
    def _remove_from(users: list[User], user_id: int) -> User | None:
        for index, user in enumerate(users):
            if user.id == user_id:
                return users.pop(index)
        return None

    # ------------------------------------------------------------------
    # Add/edit form

    def open_add(self) -> None:
        """Open the form for a new user."""
        self.editing_id = None

    def open_edit(self, user_id: int) -> User:
        """Open the form for an existing user.

        Raises:
            NotFoundError: If no user has this id.
        """
        user = self.get_user(user_id)
        self.editing_id = user_id
        return user

    def submit_form(self, name: str, email: str) -> User:
        """Save the form: edit the open user or add a new one.

        Args:
            name: Full name; the first token becomes the first name.
            email: Email address.

        Raises:
            ValidationError: If name or email is empty.
            NotFoundError: If the user being edited no longer exists.
        """
        if not name.strip():
            raise ValidationError("Name is required", field="name", value=name)
        if not email.strip():
            raise ValidationError("Email is required", field="email", value=email)

        first, last = split_full_name(name)
        if self.editing_id is None:
            user = self.add_user(first, last, email)
        else:
            user = self.edit_user(self.editing_id, first, last, email)
        self.editing_id = None
        return user
