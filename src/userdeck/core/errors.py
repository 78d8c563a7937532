"""Error hierarchy for userdeck.

Every failure the package reports is a UserDeckError. Callers handle them at
the boundary nearest the user action: the session catches fetch and cache
failures, the CLI catches validation and lookup failures.

Exception Hierarchy:
    UserDeckError (base)
    ├── RemoteFetchError      - network, HTTP status or parse failure on fetch
    │   └── FetchTimeoutError - fetch did not finish within the timeout
    ├── ValidationError       - required field missing on add/edit
    ├── NotFoundError         - edit/delete referencing an unknown user id
    ├── PersistenceError      - key-value storage failures
    └── ConfigError           - configuration loading and validation issues
"""

from typing import Any

from userdeck.core.security import SENSITIVE_FIELD_NAMES


class UserDeckError(Exception):
    """Base exception for all userdeck errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class RemoteFetchError(UserDeckError):
    """Error while fetching users from the remote source.

    Covers transport failures, HTTP error statuses and bodies that cannot be
    parsed into user records. There is no retry: a fetch failure is terminal
    for the session.

    Attributes:
        url: The URL being fetched, if known.
        status_code: HTTP status code if the server answered.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code

    @classmethod
    def from_exception(cls, exc: Exception, *, url: str | None = None) -> "RemoteFetchError":
        """Wrap a transport or parse exception.

        Args:
            exc: The original exception.
            url: The URL being fetched.

        Returns:
            A RemoteFetchError with __cause__ set to the original exception.
        """
        error = cls(
            str(exc) or type(exc).__name__,
            url=url,
            status_code=getattr(exc, "status_code", None),
            details={"original_exception": type(exc).__name__},
        )
        error.__cause__ = exc
        return error


class FetchTimeoutError(RemoteFetchError):
    """The remote fetch did not complete within the configured timeout.

    Attributes:
        timeout: The timeout in seconds that was exceeded.
    """

    def __init__(
        self,
        message: str,
        *,
        timeout: float | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, url=url, details=details)
        self.timeout = timeout


class ValidationError(UserDeckError):
    """A user form was rejected before any mutation happened.

    Attributes:
        field: The field that failed validation.
        value: The invalid value if safe to include.

    Use safe_value instead of value when logging.
    """

    _SENSITIVE_FIELDS = SENSITIVE_FIELD_NAMES

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value

    @property
    def safe_value(self) -> str:
        """Return a representation of the value that is safe to log.

        Returns:
            "<REDACTED>" for sensitive fields, a truncated repr for long
            strings, or the type name for non-string values.
        """
        if self.value is None:
            return "<None>"

        if self.field:
            field_lower = self.field.lower()
            if any(sensitive in field_lower for sensitive in self._SENSITIVE_FIELDS):
                return "<REDACTED>"

        if isinstance(self.value, str):
            if len(self.value) > 50:
                return f"{self.value[:20]}...({len(self.value)} chars)"
            return repr(self.value)

        return f"<{type(self.value).__name__}>"

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field}, value: {self.safe_value})"
        if self.details:
            base = f"{base} (details: {self.details})"
        return base


class NotFoundError(UserDeckError):
    """No user with the requested id exists in either subset.

    Attributes:
        user_id: The id that was looked up.
    """

    def __init__(
        self,
        message: str,
        *,
        user_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.user_id = user_id


class PersistenceError(UserDeckError):
    """Error from the key-value storage layer.

    Attributes:
        operation: The operation that failed (e.g., "get", "set", "decode").
        key: The storage key involved if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.key = key


class ConfigError(UserDeckError):
    """Error from configuration loading or validation.

    Attributes:
        config_key: The configuration key that caused the error.
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file
