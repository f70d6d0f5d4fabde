r"""aresult - Async HTTP client that never raises.

This package wraps httpx so that every call resolves to a normalized
result instead of raising: ``Success(data=...)`` when the request
succeeds, ``Failure(data=ErrorInfo(...))`` when it does not, whatever the
reason (HTTP error, network failure, timeout or cancellation).

Key Features:
    - Uniform ``Success`` / ``Failure`` results with a ``status`` discriminant
    - Automatic retries of network errors, timeouts and 5xx responses
    - Exponential backoff with downward jitter, interruptible by an abort signal
    - Hooks around every exchange (request rewriting, response and error
      observers, dedicated 401/403 hook)
    - Multipart upload and binary download helpers
    - CRUD sugar for REST resources

Example:
    ```pycon
    >>> import asyncio
    >>> from aresult import ApiClient, Resource
    >>> async def main():  # doctest: +SKIP
    ...     async with ApiClient(
    ...         base_url="https://api.example.com",
    ...         auth_headers={"Authorization": "Bearer token"},
    ...         retry={"retries": 2},
    ...     ) as client:
    ...         result = await client.get_one("/users/1")
    ...         if result.status:
    ...             print(result.data)
    ...         else:
    ...             print(result.data.message)
    ...         users = Resource("/users", client)
    ...         await users.create({"name": "Ada"})
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "ApiClient",
    "ClientHooks",
    "ClientOptions",
    "DownloadedFile",
    "ErrorInfo",
    "Failure",
    "InvalidArgumentError",
    "MultipartForm",
    "RequestConfig",
    "Resource",
    "Result",
    "RetryPolicy",
    "Success",
    "__version__",
    "compute_backoff",
    "is_retriable",
    "normalize_error",
    "normalize_success",
    "resource",
    "run",
    "with_auth",
]

from importlib.metadata import PackageNotFoundError, version

from aresult.backoff import compute_backoff
from aresult.callbacks import ClientHooks, RequestConfig
from aresult.client import ApiClient, with_auth
from aresult.core.config import ClientOptions, RetryPolicy
from aresult.exceptions import InvalidArgumentError
from aresult.normalize import normalize_error, normalize_success
from aresult.resource import Resource, resource
from aresult.result import DownloadedFile, ErrorInfo, Failure, Result, Success
from aresult.retry import is_retriable, run
from aresult.utils.multipart import MultipartForm

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
