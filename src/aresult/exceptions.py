r"""Exception types used by aresult.

Two families of exceptions live here. ``InvalidArgumentError`` signals a
programmer error (an empty path, a missing resource id, an unsupported
upload payload) and is raised directly to the caller. ``ExchangeError``
and its subclasses describe the failure of a single HTTP exchange; they
are raised by the transport and always captured by the execution wrapper,
which turns them into a ``Failure`` result.
"""

from __future__ import annotations

__all__ = [
    "ABORTED_CODE",
    "AresultError",
    "BAD_REQUEST_CODE",
    "BAD_OPTION_CODE",
    "BAD_RESPONSE_CODE",
    "ExchangeAbortedError",
    "ExchangeError",
    "ExchangeNetworkError",
    "ExchangeRequestError",
    "ExchangeTimeoutError",
    "InvalidArgumentError",
    "NETWORK_CODE",
    "TIMEOUT_CODE",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

ABORTED_CODE = "ERR_CANCELED"
TIMEOUT_CODE = "ECONNABORTED"
NETWORK_CODE = "ERR_NETWORK"
BAD_REQUEST_CODE = "ERR_BAD_REQUEST"
BAD_RESPONSE_CODE = "ERR_BAD_RESPONSE"
BAD_OPTION_CODE = "ERR_BAD_OPTION_VALUE"


class AresultError(Exception):
    """Base class for all aresult exceptions."""


class InvalidArgumentError(AresultError, ValueError):
    """Raised when a method is called with an invalid argument.

    This exception is never normalized into a result: it is raised
    synchronously, before any exchange is attempted.

    Example:
        ```pycon
        >>> from aresult.exceptions import InvalidArgumentError
        >>> try:
        ...     raise InvalidArgumentError("path must be a non-empty string")
        ... except ValueError as exc:
        ...     print(exc)
        ...
        path must be a non-empty string

        ```
    """


class ExchangeError(AresultError):
    """Raised when a single HTTP exchange fails.

    Args:
        message: Human-readable description of the failure.
        status_code: The HTTP status code, if a response was received.
        code: A transport-level failure code (e.g. ``"ECONNABORTED"``).
        body: The decoded response body, if any.
        response: The raw httpx response, if any.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from aresult.exceptions import ExchangeError
        >>> error = ExchangeError(
        ...     "Request failed with status code 404", status_code=404, body={"error": "missing"}
        ... )
        >>> error.status_code
        404
        >>> error.body
        {'error': 'missing'}

        ```
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        body: Any = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.body = body
        self.response = response
        self.__cause__ = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(message={self.message!r}, "
            f"status_code={self.status_code}, code={self.code!r})"
        )


class ExchangeTimeoutError(ExchangeError):
    """Raised when an exchange exceeds its timeout."""

    def __init__(self, message: str = "Request timed out", **kwargs: Any) -> None:
        kwargs.setdefault("code", TIMEOUT_CODE)
        super().__init__(message, **kwargs)


class ExchangeNetworkError(ExchangeError):
    """Raised when an exchange fails before a response is received."""

    def __init__(self, message: str = "Network Error", **kwargs: Any) -> None:
        kwargs.setdefault("code", NETWORK_CODE)
        super().__init__(message, **kwargs)


class ExchangeAbortedError(ExchangeError):
    """Raised when an exchange is cancelled through its abort signal.

    An aborted exchange is terminal: it is never retried.
    """

    def __init__(self, message: str = "Request aborted", **kwargs: Any) -> None:
        kwargs.setdefault("code", ABORTED_CODE)
        super().__init__(message, **kwargs)


class ExchangeRequestError(ExchangeError):
    """Raised when the outgoing request cannot be built.

    Typical causes are a payload that cannot be JSON encoded or an
    invalid request returned by the ``on_request`` hook. Building the
    same request again fails the same way, so it is never retried.
    """

    def __init__(self, message: str = "Invalid request", **kwargs: Any) -> None:
        kwargs.setdefault("code", BAD_OPTION_CODE)
        super().__init__(message, **kwargs)
