"""Security helpers: secret masking and input size limits.

The remote source is called with an API key header, and structured log
entries may carry request metadata. These helpers keep such values out of
logs and bound the size of user-entered form fields.
"""

from typing import Any

# Form field limits
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254
MAX_QUERY_LENGTH = 200

SENSITIVE_FIELD_NAMES = frozenset(
    {
        "password",
        "api_key",
        "apikey",
        "api-key",
        "x-api-key",
        "secret",
        "token",
        "credential",
        "private",
        "bearer",
        "authorization",
    }
)

SENSITIVE_PREFIXES = (
    "sk-",
    "pk-",
    "bearer ",
    "token ",
    "secret_",
    "reqres-",
)


def mask_api_key(api_key: str, visible_chars: int = 4) -> str:
    """Mask an API key for safe logging/display.

    Args:
        api_key: The API key to mask.
        visible_chars: Number of trailing characters to keep.

    Returns:
        Masked key like "reqres-...e-v1", or "<empty>" for an empty key.

    Example:
        >>> mask_api_key("sk-1234567890abcdef")
        'sk-...cdef'
    """
    if not api_key:
        return "<empty>"

    if len(api_key) <= visible_chars + 4:
        return "*" * len(api_key)

    if "-" in api_key[:8]:
        prefix = api_key[: api_key.index("-") + 1]
        return f"{prefix}...{api_key[-visible_chars:]}"

    return f"...{api_key[-visible_chars:]}"


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data."""
    if not field_name:
        return False

    field_lower = field_name.lower()
    return any(sensitive in field_lower for sensitive in SENSITIVE_FIELD_NAMES)


def is_sensitive_value(value: Any) -> bool:
    """Check if a value looks like a secret (API key, bearer token, ...)."""
    if not isinstance(value, str):
        return False

    value_lower = value.lower()
    return any(value_lower.startswith(prefix) for prefix in SENSITIVE_PREFIXES)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of data with sensitive values masked.

    Nested dicts are sanitized recursively.

    Example:
        >>> sanitize_for_logging({"x-api-key": "reqres-free-v1", "page": 1})
        {'x-api-key': '<REDACTED>', 'page': 1}
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if is_sensitive_field(key):
            result[key] = "<REDACTED>"
        elif isinstance(value, str) and is_sensitive_value(value):
            result[key] = mask_api_key(value)
        elif isinstance(value, dict):
            result[key] = sanitize_for_logging(value)
        else:
            result[key] = value
    return result
