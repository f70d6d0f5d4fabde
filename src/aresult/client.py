r"""Asynchronous API client returning normalized results.

This module provides ``ApiClient``, which binds the execution wrapper to
the HTTP verbs. Every method validates its path synchronously, then
resolves to a ``Success`` or a ``Failure`` and never raises for runtime
conditions (HTTP errors, network failures, timeouts, cancellation).
"""

from __future__ import annotations

__all__ = ["ApiClient", "with_auth"]

import functools
import io
import logging
from typing import TYPE_CHECKING, Any

from aresult.callbacks import invoke_hook
from aresult.core.config import ClientOptions, resolve_retry_policy
from aresult.core.validation import validate_path
from aresult.exceptions import InvalidArgumentError
from aresult.result import DownloadedFile, Success
from aresult.retry.executor import run, run_with_outcome
from aresult.transport import RESPONSE_TYPES, HttpTransport, merge_headers
from aresult.utils.content_disposition import extract_filename
from aresult.utils.multipart import build_upload_form, multipart_content_type

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Coroutine, Mapping
    from types import TracebackType
    from typing import Self

    import httpx

    from aresult.callbacks import ClientHooks
    from aresult.core.config import RetryOverride, RetryPolicy
    from aresult.exchange import Exchange, ExchangeResponse
    from aresult.result import Result

logger: logging.Logger = logging.getLogger(__name__)


class ApiClient:
    r"""Asynchronous HTTP client whose calls never raise.

    Each method returns ``Success(data=...)`` or ``Failure(data=ErrorInfo)``.
    Only programmer errors (an empty path, an unsupported upload payload)
    raise ``InvalidArgumentError``, synchronously, before any request is
    sent.

    Args:
        base_url: Prefix for relative request paths.
        timeout: Default timeout in seconds. Must be > 0.
        default_headers: Headers sent with every request. They win over
            ``auth_headers``.
        auth_headers: Authentication headers sent with every request.
        hooks: Hooks invoked around every exchange.
        retry: Client-level retry defaults; per-call ``retry`` overrides
            them field by field.
        options: A ``ClientOptions`` instance. Explicit keyword
            arguments override its fields.
        client: Optional externally managed ``httpx.AsyncClient``.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresult import ApiClient
        >>> async def main():  # doctest: +SKIP
        ...     async with ApiClient(base_url="https://api.example.com") as client:
        ...         result = await client.get_one("/users/1", retry={"retries": 2})
        ...     if result.status:
        ...         print(result.data)
        ...     else:
        ...         print(result.data.message)
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        default_headers: Mapping[str, str] | None = None,
        auth_headers: Mapping[str, str] | None = None,
        hooks: ClientHooks | None = None,
        retry: RetryOverride = None,
        options: ClientOptions | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        options = options if options is not None else ClientOptions()
        self._options = options.merge(
            base_url=base_url,
            timeout=timeout,
            default_headers=default_headers,
            auth_headers=auth_headers,
            hooks=hooks,
            retry=resolve_retry_policy(retry, base=options.retry) if retry is not None else None,
        )
        self._transport = HttpTransport(
            base_url=self._options.base_url,
            timeout=self._options.timeout,
            default_headers=self._options.default_headers,
            auth_headers=self._options.auth_headers,
            hooks=self._options.hooks,
            client=client,
            transport=transport,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_url={self._options.base_url!r})"

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        await self._transport.aclose()

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def raw(self) -> httpx.AsyncClient:
        """The underlying ``httpx.AsyncClient``, for advanced use."""
        return self._transport.client

    @property
    def retry_policy(self) -> RetryPolicy:
        """The client-level retry defaults."""
        return self._options.retry

    def get_many(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        timeout: float | None = None,
        response_type: str = "json",
        retry: RetryOverride = None,
    ) -> Coroutine[Any, Any, Result[Any]]:
        """Send a GET request for a collection.

        The arguments are validated when the method is called, before
        the returned coroutine is awaited.

        Args:
            path: The request path. Must be a non-empty string.
            params: Query parameters.
            headers: Per-call headers.
            signal: Abort signal shared by all attempts.
            timeout: Per-call timeout in seconds.
            response_type: One of ``"json"``, ``"text"``, ``"bytes"``.
            retry: Retry override, e.g. ``{"retries": 3}``.

        Returns:
            A coroutine resolving to the normalized result.

        Raises:
            InvalidArgumentError: If ``path`` is empty or
                ``response_type`` is unknown.
        """
        return self._request(
            "GET",
            path,
            params=params,
            headers=headers,
            signal=signal,
            timeout=timeout,
            response_type=response_type,
            retry=retry,
        )

    def get_one(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        timeout: float | None = None,
        response_type: str = "json",
        retry: RetryOverride = None,
    ) -> Coroutine[Any, Any, Result[Any]]:
        """Send a GET request for a single item.

        Takes the same arguments as ``get_many``.
        """
        return self._request(
            "GET",
            path,
            params=params,
            headers=headers,
            signal=signal,
            timeout=timeout,
            response_type=response_type,
            retry=retry,
        )

    def post(self, path: str, payload: Any = None, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Send a POST request.

        Args:
            path: The request path. Must be a non-empty string.
            payload: The body. ``bytes`` and ``str`` are sent as raw
                content, anything else is JSON encoded.
            **kwargs: ``headers``, ``signal``, ``timeout``,
                ``response_type`` and ``retry`` (see ``get_many``).

        Returns:
            A coroutine resolving to the normalized result.
        """
        return self._request("POST", path, payload=payload, **kwargs)

    def put(self, path: str, payload: Any = None, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Send a PUT request (see ``post``)."""
        return self._request("PUT", path, payload=payload, **kwargs)

    def patch(self, path: str, payload: Any = None, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Send a PATCH request (see ``post``)."""
        return self._request("PATCH", path, payload=payload, **kwargs)

    def remove(self, path: str, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Send a DELETE request.

        Takes the same keyword arguments as ``get_many``.
        """
        return self._request("DELETE", path, **kwargs)

    def upload(
        self,
        path: str,
        data: Any,
        *,
        field_name: str = "file",
        on_upload_progress: Callable[[int | None, int | None], None] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        timeout: float | None = None,
        retry: RetryOverride = None,
    ) -> Coroutine[Any, Any, Result[Any]]:
        """Upload a multipart form with a POST request.

        Args:
            path: The request path. Must be a non-empty string.
            data: A ``MultipartForm``, binary content (``bytes``, a binary
                file object, or a ``(filename, content[, content_type])``
                tuple) sent under ``field_name``, or a mapping whose
                non-None values are sent as text fields.
            field_name: Field name used for binary content.
            on_upload_progress: Called with ``(bytes_sent, total)`` once
                the upload has been accepted. Sizes are ``None`` when
                they cannot be determined.
            headers: Per-call headers. ``Content-Type`` is always replaced
                by ``multipart/form-data``.
            signal: Abort signal shared by all attempts.
            timeout: Per-call timeout in seconds.
            retry: Retry override.

        Returns:
            A coroutine resolving to the normalized result.

        Raises:
            InvalidArgumentError: If ``path`` is empty or ``data`` has an
                unsupported shape.
        """
        validate_path(path)
        parts = build_upload_form(data, field_name=field_name).to_files()
        on_sent = None
        if on_upload_progress is not None:
            size = _form_size(parts)
            on_sent = functools.partial(on_upload_progress, size, size)
        return self._request(
            "POST",
            path,
            files=parts,
            headers=merge_headers(headers, {"Content-Type": multipart_content_type()}),
            signal=signal,
            timeout=timeout,
            retry=retry,
            on_sent=on_sent,
        )

    def download(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        timeout: float | None = None,
        retry: RetryOverride = None,
    ) -> Coroutine[Any, Any, Result[DownloadedFile]]:
        """Download a binary resource.

        The response body is returned as bytes. The filename is taken
        from the ``Content-Disposition`` header when present; failing to
        extract it never fails the call.

        Returns:
            A coroutine resolving to
            ``Success(DownloadedFile(blob, filename))`` or a ``Failure``.

        Raises:
            InvalidArgumentError: If ``path`` is empty.
        """
        validate_path(path)
        exchange = self._exchange(
            "GET",
            path,
            params=params,
            headers=headers,
            signal=signal,
            timeout=timeout,
            response_type="bytes",
        )
        return self._download(path, exchange, retry=retry, signal=signal)

    async def _download(
        self,
        path: str,
        exchange: Exchange,
        *,
        retry: RetryOverride,
        signal: asyncio.Event | None,
    ) -> Result[DownloadedFile]:
        outcome = await run_with_outcome(
            exchange,
            retry,
            base=self._options.retry,
            signal=signal,
            description=f"GET {path}",
        )
        if not outcome.result.status:
            return outcome.result

        filename = None
        try:
            filename = extract_filename(outcome.response.headers.get("content-disposition"))
        except Exception:  # noqa: BLE001
            logger.warning(f"Could not extract filename from headers of {path}", exc_info=True)
        return Success(data=DownloadedFile(blob=outcome.result.data, filename=filename))

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Any = None,
        files: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        timeout: float | None = None,
        response_type: str = "json",
        retry: RetryOverride = None,
        on_sent: Callable[[], None] | None = None,
    ) -> Coroutine[Any, Any, Result[Any]]:
        validate_path(path)
        if response_type not in RESPONSE_TYPES:
            msg = f"response_type must be one of {RESPONSE_TYPES}, got {response_type!r}"
            raise InvalidArgumentError(msg)
        exchange = self._exchange(
            method,
            path,
            payload=payload,
            files=files,
            params=params,
            headers=headers,
            signal=signal,
            timeout=timeout,
            response_type=response_type,
            on_sent=on_sent,
        )
        return run(
            exchange,
            retry,
            base=self._options.retry,
            signal=signal,
            description=f"{method} {path}",
        )

    def _exchange(
        self,
        method: str,
        path: str,
        *,
        payload: Any = None,
        files: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        signal: asyncio.Event | None = None,
        timeout: float | None = None,
        response_type: str = "json",
        on_sent: Callable[[], None] | None = None,
    ) -> Exchange:
        transport = self._transport

        async def exchange() -> ExchangeResponse:
            response = await transport.send(
                method,
                path,
                params=params,
                data=payload,
                files=files,
                headers=headers,
                timeout=timeout,
                response_type=response_type,
                signal=signal,
            )
            invoke_hook("on_upload_progress", on_sent)
            return response

        return exchange


def with_auth(**kwargs: Any) -> ApiClient:
    r"""Create an ``ApiClient``.

    Accepts the keyword arguments of ``ApiClient``.

    Example:
        ```pycon
        >>> from aresult import with_auth
        >>> client = with_auth(
        ...     base_url="https://api.example.com",
        ...     auth_headers={"Authorization": "Bearer token"},
        ... )
        >>> client
        ApiClient(base_url='https://api.example.com')

        ```
    """
    return ApiClient(**kwargs)


def _form_size(parts: list[tuple[str, tuple[Any, Any, Any]]]) -> int | None:
    total = 0
    for _, (_, content, _) in parts:
        if isinstance(content, (bytes, str)):
            total += len(content)
        elif isinstance(content, io.IOBase) and content.seekable():
            # httpx rewinds file parts before sending them
            position = content.tell()
            total += content.seek(0, io.SEEK_END)
            content.seek(position)
        else:
            return None
    return total
