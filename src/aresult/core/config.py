r"""Configuration dataclasses and defaults for aresult clients.

This module provides the default constants, the immutable
``RetryPolicy`` used by the execution wrapper, and the
``ClientOptions`` dataclass describing how an ``ApiClient`` is built.
"""

from __future__ import annotations

__all__ = [
    "ClientOptions",
    "DEFAULT_BASE_DELAY_MS",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_JITTER",
    "DEFAULT_MAX_DELAY_MS",
    "DEFAULT_RETRIES",
    "DEFAULT_RETRY_POLICY",
    "DEFAULT_TIMEOUT",
    "RetryPolicy",
    "RetryOverride",
    "resolve_retry_policy",
]

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any, Union

from aresult.core.validation import validate_retry_params, validate_timeout

if TYPE_CHECKING:
    from aresult.callbacks import ClientHooks


# Default timeout in seconds for HTTP requests
DEFAULT_TIMEOUT = 10.0

# Number of extra attempts beyond the first one
# Total attempts = retries + 1
DEFAULT_RETRIES = 1

# Wait before the first retry, doubled on every following retry
DEFAULT_BASE_DELAY_MS = 300

# Cap on the wait between two attempts
DEFAULT_MAX_DELAY_MS = 2000

# Remove up to 30% of each wait at random to spread concurrent retries
DEFAULT_JITTER = True

# Content type sent unless auth/default/per-call headers override it
DEFAULT_CONTENT_TYPE = "application/json"

_CAMEL_CASE_KEYS = {
    "baseDelayMs": "base_delay_ms",
    "maxDelayMs": "max_delay_ms",
}


@dataclass(frozen=True)
class RetryPolicy:
    """Retry behavior of a single request.

    Args:
        retries: Number of extra attempts beyond the first. Must be >= 0.
        base_delay_ms: Wait before the first retry in milliseconds.
            Must be > 0.
        max_delay_ms: Cap on the wait between retries in milliseconds.
            Must be >= base_delay_ms.
        jitter: Whether to randomize waits downwards by up to 30%.

    Example:
        ```pycon
        >>> from aresult.core.config import RetryPolicy
        >>> policy = RetryPolicy()
        >>> policy.retries
        1
        >>> merged = policy.merge(retries=3, jitter=None)
        >>> merged.retries, merged.jitter
        (3, True)
        >>> policy.retries  # Original unchanged
        1

        ```
    """

    retries: int = DEFAULT_RETRIES
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS
    jitter: bool = DEFAULT_JITTER

    def __post_init__(self) -> None:
        validate_retry_params(
            retries=self.retries,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
        )

    @property
    def max_attempts(self) -> int:
        return 1 + max(0, self.retries)

    def merge(self, **overrides: Any) -> RetryPolicy:
        """Create a new policy with specified fields overridden.

        Only non-None override values are applied. Keys may use either
        snake_case or the camelCase names of the JSON configuration
        (``baseDelayMs``, ``maxDelayMs``).

        Args:
            **overrides: Keyword arguments for fields to override.

        Returns:
            A new RetryPolicy instance with overrides applied.

        Raises:
            ValueError: If an unknown field is given or the merged
                values are out of range.
        """
        filtered = {}
        for key, value in overrides.items():
            if value is None:
                continue
            filtered[_CAMEL_CASE_KEYS.get(key, key)] = value
        known = {f.name for f in fields(self)}
        unknown = sorted(set(filtered) - known)
        if unknown:
            msg = f"Unknown retry option(s): {', '.join(unknown)}"
            raise ValueError(msg)
        return replace(self, **filtered)

    def to_dict(self) -> dict[str, Any]:
        return {
            "retries": self.retries,
            "base_delay_ms": self.base_delay_ms,
            "max_delay_ms": self.max_delay_ms,
            "jitter": self.jitter,
        }


DEFAULT_RETRY_POLICY = RetryPolicy()

RetryOverride = Union[RetryPolicy, Mapping[str, Any], None]


def resolve_retry_policy(
    retry: RetryOverride = None, base: RetryPolicy = DEFAULT_RETRY_POLICY
) -> RetryPolicy:
    """Merge a caller-supplied retry override onto a base policy.

    Args:
        retry: ``None`` to keep the base policy, a complete
            ``RetryPolicy``, or a partial mapping such as
            ``{"retries": 2}``.
        base: The policy whose fields are kept when not overridden.

    Returns:
        The resolved policy.

    Raises:
        ValueError: If the override is malformed.

    Example:
        ```pycon
        >>> from aresult.core.config import resolve_retry_policy
        >>> resolve_retry_policy({"retries": 2, "baseDelayMs": 100}).to_dict()
        {'retries': 2, 'base_delay_ms': 100, 'max_delay_ms': 2000, 'jitter': True}

        ```
    """
    if retry is None:
        return base
    if isinstance(retry, RetryPolicy):
        return retry
    if isinstance(retry, Mapping):
        return base.merge(**retry)
    msg = f"retry must be a RetryPolicy, a mapping or None, got {type(retry).__qualname__}"
    raise ValueError(msg)


@dataclass(frozen=True)
class ClientOptions:
    """Configuration of an ``ApiClient`` instance.

    Args:
        base_url: Prefix prepended to every relative request path.
        timeout: Default timeout in seconds. Must be > 0.
        default_headers: Headers sent with every request. They win over
            ``auth_headers``.
        auth_headers: Authentication headers sent with every request.
        hooks: Optional hooks invoked around every exchange.
        retry: Client-level retry defaults, overridden per call.

    Example:
        ```pycon
        >>> from aresult.core.config import ClientOptions
        >>> options = ClientOptions(base_url="https://api.example.com")
        >>> options.merge(timeout=30.0).timeout
        30.0
        >>> options.timeout
        10.0

        ```
    """

    base_url: str = ""
    timeout: float | None = DEFAULT_TIMEOUT
    default_headers: Mapping[str, str] = field(default_factory=dict)
    auth_headers: Mapping[str, str] = field(default_factory=dict)
    hooks: ClientHooks | None = None
    retry: RetryPolicy = DEFAULT_RETRY_POLICY

    def __post_init__(self) -> None:
        validate_timeout(self.timeout)
        if not isinstance(self.retry, RetryPolicy):
            object.__setattr__(self, "retry", resolve_retry_policy(self.retry))

    def merge(self, **overrides: Any) -> ClientOptions:
        """Create new options with the non-None overrides applied."""
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)
