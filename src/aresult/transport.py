r"""Transport glue around ``httpx.AsyncClient``.

``HttpTransport`` performs exactly one HTTP exchange per ``send`` call.
It merges headers, runs the client hooks, races the request against the
caller's abort signal, decodes the response body, and converts every
failure into an ``ExchangeError``. It never retries; retries are the job
of the execution wrapper in ``aresult.retry.executor``.
"""

from __future__ import annotations

__all__ = ["RESPONSE_TYPES", "HttpTransport", "decode_body", "merge_headers"]

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

import httpx

from aresult.callbacks import (
    AUTH_ERROR_STATUS_CODES,
    ClientHooks,
    RequestConfig,
    apply_request_hook,
    invoke_hook,
)
from aresult.core.config import DEFAULT_CONTENT_TYPE, DEFAULT_TIMEOUT
from aresult.core.validation import validate_timeout
from aresult.exceptions import (
    BAD_REQUEST_CODE,
    BAD_RESPONSE_CODE,
    ExchangeAbortedError,
    ExchangeError,
    ExchangeNetworkError,
    ExchangeRequestError,
    ExchangeTimeoutError,
)
from aresult.exchange import ExchangeResponse

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

RESPONSE_TYPES = ("json", "text", "bytes")


def merge_headers(*layers: Mapping[str, str] | None) -> httpx.Headers:
    """Merge header mappings case-insensitively, later layers winning.

    Example:
        ```pycon
        >>> from aresult.transport import merge_headers
        >>> headers = merge_headers(
        ...     {"Content-Type": "application/json"}, {"content-type": "text/plain"}
        ... )
        >>> headers["Content-Type"]
        'text/plain'

        ```
    """
    merged = httpx.Headers()
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            merged[key] = value
    return merged


def decode_body(response: httpx.Response, response_type: str = "json") -> Any:
    """Decode a response body.

    Args:
        response: The httpx response.
        response_type: ``"json"`` parses JSON and falls back to text when
            the body is not valid JSON; an empty body decodes to
            ``None``. ``"text"`` returns the text and ``"bytes"`` the
            raw content.

    Returns:
        The decoded body.
    """
    if response_type == "bytes":
        return response.content
    if response_type == "text":
        return response.text
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpTransport:
    r"""Single-exchange HTTP transport.

    Headers are layered as: ``Content-Type: application/json``, then
    ``auth_headers``, then ``default_headers``, then per-call headers.

    Args:
        base_url: Prefix for relative request paths.
        timeout: Default timeout in seconds. Must be > 0.
        default_headers: Headers sent with every request.
        auth_headers: Authentication headers sent with every request.
        hooks: Hooks invoked around every exchange.
        client: Optional externally managed ``httpx.AsyncClient``.
            It is not closed by ``aclose``.
        transport: Optional httpx transport used when the client is
            created here (e.g. ``httpx.MockTransport`` in tests).

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from aresult.transport import HttpTransport
        >>> async def main():
        ...     mock = httpx.MockTransport(lambda request: httpx.Response(200, json={"id": 1}))
        ...     transport = HttpTransport(base_url="https://api.example.com", transport=mock)
        ...     response = await transport.send("GET", "/users/1")
        ...     await transport.aclose()
        ...     return response.data
        ...
        >>> asyncio.run(main())
        {'id': 1}

        ```
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout: float | None = DEFAULT_TIMEOUT,
        default_headers: Mapping[str, str] | None = None,
        auth_headers: Mapping[str, str] | None = None,
        hooks: ClientHooks | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        validate_timeout(timeout)
        self._timeout = timeout
        self._headers = merge_headers(
            {"Content-Type": DEFAULT_CONTENT_TYPE}, auth_headers, default_headers
        )
        self._hooks = hooks if hooks is not None else ClientHooks()
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url, timeout=timeout, transport=transport, follow_redirects=True
            )
        self._client = client

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_url={str(self._client.base_url)!r})"

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def headers(self) -> httpx.Headers:
        return self._headers

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        files: Any = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        response_type: str = "json",
        signal: asyncio.Event | None = None,
    ) -> ExchangeResponse:
        """Perform one HTTP exchange.

        Args:
            method: The HTTP method.
            url: The request path or absolute URL.
            params: Query parameters.
            data: The request payload. ``bytes`` and ``str`` are sent as
                raw content, anything else is JSON encoded.
            files: Multipart parts in the httpx ``files`` format. When
                given, ``data`` is ignored.
            headers: Per-call headers, layered over the client headers.
            timeout: Per-call timeout in seconds.
            response_type: One of ``"json"``, ``"text"``, ``"bytes"``.
            signal: Optional abort signal.

        Returns:
            The decoded response.

        Raises:
            ExchangeAbortedError: If the signal is set before or during
                the exchange.
            ExchangeRequestError: If the request cannot be built.
            ExchangeTimeoutError: If the exchange times out.
            ExchangeNetworkError: If no response could be obtained.
            ExchangeError: If the response status is >= 400.
        """
        if signal is not None and signal.is_set():
            error = ExchangeAbortedError()
            self._notify_error(error)
            raise error

        config = apply_request_hook(
            self._hooks.on_request,
            RequestConfig(
                method=method.upper(),
                url=url,
                params=params,
                headers=dict(merge_headers(self._headers, headers).items()),
                timeout=timeout,
                data=files if files is not None else data,
                response_type=response_type,
            ),
        )
        try:
            request = self._client.build_request(
                config.method,
                config.url,
                params=config.params,
                headers=merge_headers(config.headers),
                timeout=config.timeout if config.timeout is not None else httpx.USE_CLIENT_DEFAULT,
                **_encode_body(config.data, is_multipart=files is not None),
            )
        except Exception as exc:  # noqa: BLE001
            error = ExchangeRequestError(f"Invalid request: {exc}", cause=exc)
            self._notify_error(error)
            raise error from exc

        try:
            response = await self._send_cancellable(request, signal)
        except ExchangeError as error:
            self._notify_error(error)
            raise
        except httpx.TimeoutException as exc:
            error = ExchangeTimeoutError(
                f"timeout of {self._describe_timeout(config)} exceeded", cause=exc
            )
            self._notify_error(error)
            raise error from exc
        except httpx.HTTPError as exc:
            error = ExchangeNetworkError(str(exc) or "Network Error", cause=exc)
            self._notify_error(error)
            raise error from exc

        if response.is_error:
            status = response.status_code
            error = ExchangeError(
                f"Request failed with status code {status}",
                status_code=status,
                code=BAD_RESPONSE_CODE if status >= 500 else BAD_REQUEST_CODE,
                body=decode_body(response),
                response=response,
            )
            self._notify_error(error)
            raise error

        invoke_hook("on_response", self._hooks.on_response, response)
        return ExchangeResponse(
            status_code=response.status_code,
            headers=response.headers,
            data=decode_body(response, config.response_type),
        )

    async def _send_cancellable(
        self, request: httpx.Request, signal: asyncio.Event | None
    ) -> httpx.Response:
        if signal is None:
            return await self._client.send(request)

        send_task = asyncio.ensure_future(self._client.send(request))
        abort_task = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            abort_task.cancel()
            if not send_task.done():
                send_task.cancel()
                with contextlib.suppress(asyncio.CancelledError, httpx.HTTPError):
                    await send_task
        if send_task.cancelled():
            logger.debug(f"{request.method} {request.url} aborted by signal")
            raise ExchangeAbortedError()
        return send_task.result()

    def _notify_error(self, error: ExchangeError) -> None:
        if error.status_code in AUTH_ERROR_STATUS_CODES:
            invoke_hook("on_auth_error", self._hooks.on_auth_error, error, self)
        invoke_hook("on_error", self._hooks.on_error, error)

    def _describe_timeout(self, config: RequestConfig) -> str:
        timeout = config.timeout if config.timeout is not None else self._timeout
        return f"{timeout}s" if timeout is not None else "transport"


def _encode_body(data: Any, is_multipart: bool) -> dict[str, Any]:
    if data is None:
        return {}
    if is_multipart:
        return {"files": data}
    if isinstance(data, (bytes, bytearray, str)):
        return {"content": data}
    return {"json": data}
