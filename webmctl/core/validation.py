"""Input validation for webmctl.

Validators return the normalized value or raise a typed exception from
``webmctl.core.exceptions``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from webmctl.core.exceptions import (
    ConfigurationError,
    HeaderConfigError,
    InvalidArgumentError,
    UrlConfigError,
)

# =============================================================================
# Constants
# =============================================================================

SUPPORTED_SCHEMES = ("http", "https")

# RFC 7230 token characters
HEADER_NAME_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

MIN_CHUNK_SIZE = 1
MAX_CHUNK_SIZE = 512 * 1024 * 1024


# =============================================================================
# URL Validation
# =============================================================================


def validate_target_url(url: str | None) -> str:
    """Validate an upload endpoint URL.

    Unlike a server base URL the path is significant, so only surrounding
    whitespace is stripped.

    Args:
        url: URL to validate.

    Returns:
        Normalized URL.

    Raises:
        UrlConfigError: If the URL is empty or malformed.
    """
    if not url or not isinstance(url, str) or not url.strip():
        raise UrlConfigError(str(url or ""), "URL is required")

    url = url.strip()
    parsed = urlparse(url)

    if not parsed.scheme:
        raise UrlConfigError(url, "URL must include scheme (http:// or https://)")
    if parsed.scheme.lower() not in SUPPORTED_SCHEMES:
        raise UrlConfigError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.hostname:
        raise UrlConfigError(url, "URL must include hostname")
    if any(c in url for c in "\r\n\t "):
        raise UrlConfigError(url, "URL contains whitespace")

    return url


# =============================================================================
# Header / Form Validation
# =============================================================================


def validate_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Validate custom HTTP headers.

    Args:
        headers: Mapping of header name to value.

    Returns:
        Plain dict copy of the headers.

    Raises:
        HeaderConfigError: If a name is not a valid token or a value contains
            line breaks.
    """
    if headers is None:
        return {}
    if not isinstance(headers, Mapping):
        raise HeaderConfigError(repr(headers), "headers must be a mapping")

    result: dict[str, str] = {}
    for name, value in headers.items():
        if not isinstance(name, str) or not HEADER_NAME_PATTERN.match(name):
            raise HeaderConfigError(str(name), "header name must be an HTTP token")
        value = "" if value is None else str(value)
        if "\r" in value or "\n" in value:
            raise HeaderConfigError(name, "header value must not contain line breaks")
        result[name] = value
    return result


def validate_form_variables(form_variables: Mapping[str, Any] | None) -> dict[str, str]:
    """Validate multipart form variables.

    Args:
        form_variables: Mapping of field name to value.

    Returns:
        Plain dict copy with string values.

    Raises:
        InvalidArgumentError: If a field name is empty.
    """
    if form_variables is None:
        return {}
    if not isinstance(form_variables, Mapping):
        raise InvalidArgumentError("form_variables must be a mapping", field="form_variables")

    result: dict[str, str] = {}
    for name, value in form_variables.items():
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("Form variable name is required", field="form_variables", value=name)
        result[name] = "" if value is None else str(value)
    return result


def parse_key_value_pairs(pairs: tuple[str, ...] | list[str], *, option: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings from repeated CLI options.

    Args:
        pairs: Raw option values.
        option: Option name for error messages.

    Returns:
        Ordered dict of parsed pairs.

    Raises:
        InvalidArgumentError: If an entry has no ``=`` or an empty key.
    """
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidArgumentError(f"Expected KEY=VALUE for {option}", field=option, value=pair)
        result[key] = value
    return result


# =============================================================================
# Numeric Validation
# =============================================================================


def validate_chunk_size(value: Any, *, default: int) -> int:
    """Validate a chunk size in bytes.

    Raises:
        ConfigurationError: If the value is not an integer in range.
    """
    if value is None:
        return default
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError("Chunk size must be a valid integer", field="chunk_size", value=value)
    if size < MIN_CHUNK_SIZE:
        raise ConfigurationError(
            f"Chunk size must be at least {MIN_CHUNK_SIZE} byte", field="chunk_size", value=value
        )
    if size > MAX_CHUNK_SIZE:
        raise ConfigurationError(
            f"Chunk size cannot exceed {MAX_CHUNK_SIZE} bytes", field="chunk_size", value=value
        )
    return size


def validate_timeout(value: Any, *, default: int) -> int:
    """Validate a timeout in seconds.

    Raises:
        ConfigurationError: If the value is not a positive integer.
    """
    if value is None:
        return default
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError("Timeout must be a valid integer", field="timeout", value=value)
    if timeout < 1:
        raise ConfigurationError("Timeout must be at least 1 second", field="timeout", value=value)
    return timeout
