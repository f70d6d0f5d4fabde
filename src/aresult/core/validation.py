r"""Parameter validation utilities.

This module provides validation functions for retry parameters, client
configuration and request targets. Every function raises before any
network activity takes place, so failures here always indicate a
programmer error rather than a runtime condition.
"""

from __future__ import annotations

__all__ = [
    "validate_path",
    "validate_resource_id",
    "validate_retry_params",
    "validate_subpath",
    "validate_timeout",
]

from typing import TYPE_CHECKING, Any

from aresult.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout | None) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from aresult.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(None)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(
    retries: int,
    base_delay_ms: float,
    max_delay_ms: float,
) -> None:
    """Validate retry parameters.

    Args:
        retries: Number of extra attempts beyond the first. Must be >= 0.
        base_delay_ms: Starting wait before the first retry, in
            milliseconds. Must be > 0.
        max_delay_ms: Cap on the wait between retries, in milliseconds.
            Must be >= base_delay_ms.

    Raises:
        ValueError: If any parameter is out of range.

    Example:
        ```pycon
        >>> from aresult.core.validation import validate_retry_params
        >>> validate_retry_params(retries=1, base_delay_ms=300, max_delay_ms=2000)
        >>> validate_retry_params(retries=-1, base_delay_ms=300, max_delay_ms=2000)  # doctest: +SKIP

        ```
    """
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
        msg = f"retries must be an integer >= 0, got {retries!r}"
        raise ValueError(msg)
    if base_delay_ms <= 0:
        msg = f"base_delay_ms must be > 0, got {base_delay_ms}"
        raise ValueError(msg)
    if max_delay_ms < base_delay_ms:
        msg = f"max_delay_ms must be >= base_delay_ms ({base_delay_ms}), got {max_delay_ms}"
        raise ValueError(msg)


def validate_path(path: Any) -> None:
    """Validate a request path or URL.

    Args:
        path: The path to validate.

    Raises:
        InvalidArgumentError: If ``path`` is not a non-blank string.

    Example:
        ```pycon
        >>> from aresult.core.validation import validate_path
        >>> validate_path("/users")
        >>> validate_path("")
        Traceback (most recent call last):
        ...
        aresult.exceptions.InvalidArgumentError: URL must be a non-empty string, got ''

        ```
    """
    if not isinstance(path, str) or not path.strip():
        msg = f"URL must be a non-empty string, got {path!r}"
        raise InvalidArgumentError(msg)


def validate_resource_id(resource_id: Any) -> None:
    """Validate a resource identifier.

    Args:
        resource_id: The identifier to validate. Integers (including 0)
            and non-empty strings are accepted.

    Raises:
        InvalidArgumentError: If ``resource_id`` is ``None`` or ``""``.
    """
    if resource_id is None or resource_id == "":
        msg = f"Resource ID must be provided and non-empty, got {resource_id!r}"
        raise InvalidArgumentError(msg)


def validate_subpath(subpath: Any) -> None:
    """Validate a resource action subpath.

    Args:
        subpath: The subpath to validate.

    Raises:
        InvalidArgumentError: If ``subpath`` is not a non-blank string.
    """
    if not isinstance(subpath, str) or not subpath.strip():
        msg = f"Subpath must be a non-empty string, got {subpath!r}"
        raise InvalidArgumentError(msg)
