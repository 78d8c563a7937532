"""Remote user source.

Fetches the origin user set from a reqres-style REST API. All configured
pages are requested concurrently over one httpx.AsyncClient and returned in
page order, whatever order the responses arrive in.

There is deliberately no retry: the first failure ends the fetch and is
reported as RemoteFetchError (or FetchTimeoutError when the configured
timeout is exceeded).

Usage:
    source = RemoteUserSource("https://reqres.in/api", pages=(1, 2), timeout=10.0)
    pages = await source.fetch_all()
"""

import asyncio
from collections.abc import Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError
import structlog

from userdeck.core.errors import FetchTimeoutError, RemoteFetchError
from userdeck.sources.records import RemoteUserPage
from userdeck.users.models import PLACEHOLDER_AVATAR, User

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://reqres.in/api"
DEFAULT_PAGES = (1, 2)
DEFAULT_TIMEOUT = 10.0


class RemoteUserSource:
    """Fetches pages of users from ``GET {base_url}/users?page={n}``.

    Args:
        base_url: API root, without the ``/users`` path.
        pages: Page numbers to fetch, in the order they are concatenated.
        timeout: Seconds allowed for the whole fetch.
        api_key: Optional key sent as the ``x-api-key`` header.
        placeholder_avatar: Avatar used for records without one.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        pages: Sequence[int] = DEFAULT_PAGES,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str | None = None,
        placeholder_avatar: str = PLACEHOLDER_AVATAR,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._pages = tuple(pages)
        self._timeout = timeout
        self._api_key = api_key
        self._placeholder_avatar = placeholder_avatar
        self._transport = transport

    @property
    def pages(self) -> tuple[int, ...]:
        return self._pages

    def page_url(self, page: int) -> str:
        """URL of one page, as reported in errors and logs."""
        return f"{self._base_url}/users?page={page}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers(),
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )

    async def fetch_page(self, client: httpx.AsyncClient, page: int) -> list[User]:
        """Fetch and normalize one page.

        Args:
            client: Open client to issue the request with.
            page: Page number.

        Returns:
            Users on the page, in server order.

        Raises:
            FetchTimeoutError: If the request timed out.
            RemoteFetchError: On transport errors, HTTP status >= 400,
                invalid JSON, or a body without a valid ``data`` list.
        """
        url = self.page_url(page)
        log.debug("remote.page.requested", url=url)

        try:
            response = await client.get(f"{self._base_url}/users", params={"page": page})
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(
                f"Timed out fetching {url}",
                timeout=self._timeout,
                url=url,
                details={"original_exception": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            raise RemoteFetchError.from_exception(e, url=url) from e

        if response.status_code >= 400:
            raise RemoteFetchError(
                f"Remote source returned {response.status_code} for {url}",
                url=url,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteFetchError(
                f"Response from {url} is not valid JSON",
                url=url,
                status_code=response.status_code,
            ) from e

        try:
            parsed = RemoteUserPage.model_validate(body)
        except PydanticValidationError as e:
            raise RemoteFetchError(
                f"Response from {url} does not contain a valid user list",
                url=url,
                status_code=response.status_code,
                details={"validation_errors": e.error_count()},
            ) from e

        users = parsed.to_users(self._placeholder_avatar)
        log.debug("remote.page.fetched", url=url, user_count=len(users))
        return users

    async def fetch_all(self) -> list[list[User]]:
        """Fetch every configured page concurrently.

        Returns:
            One list of users per page, in the configured page order.

        Raises:
            FetchTimeoutError: If the fetch did not finish within the timeout.
            RemoteFetchError: If any page failed; the first failing page in
                page order is reported.
        """
        log.info(
            "remote.fetch.started",
            base_url=self._base_url,
            pages=list(self._pages),
            authenticated=self._api_key is not None,
        )

        try:
            async with asyncio.timeout(self._timeout), self._client() as client:
                results = await asyncio.gather(
                    *(self.fetch_page(client, page) for page in self._pages),
                    return_exceptions=True,
                )
        except TimeoutError as e:
            log.warning("remote.fetch.timed_out", timeout=self._timeout)
            raise FetchTimeoutError(
                f"Fetching users took longer than {self._timeout}s",
                timeout=self._timeout,
                url=self._base_url,
            ) from e

        pages: list[list[User]] = []
        for result in results:
            if isinstance(result, RemoteFetchError):
                log.warning("remote.fetch.failed", error=result.message, url=result.url)
                raise result
            if isinstance(result, BaseException):
                raise result
            pages.append(result)

        log.info("remote.fetch.completed", user_count=sum(len(page) for page in pages))
        return pages
