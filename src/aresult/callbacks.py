r"""Hooks invoked around every HTTP exchange.

A client accepts four optional hooks, grouped in ``ClientHooks``:

- on_request: Called before each exchange. It receives a
  ``RequestConfig`` and may return a modified one (or a mapping of the
  fields to change), which is merged over the outgoing request
- on_response: Called with every successful ``httpx.Response``
- on_error: Called with every failed exchange
- on_auth_error: Called in addition to ``on_error`` when the HTTP
  status is 401 or 403

Hooks are observers: an exception raised inside a hook is logged and
suppressed, and never changes the result of the request.

Example:
    ```pycon
    >>> from aresult.callbacks import ClientHooks, RequestConfig
    >>> def add_trace_header(config: RequestConfig) -> dict:
    ...     return {"headers": {**config.headers, "X-Trace-Id": "abc"}}
    ...
    >>> hooks = ClientHooks(on_request=add_trace_header)
    >>> hooks.on_request is add_trace_header
    True

    ```
"""

from __future__ import annotations

__all__ = [
    "AUTH_ERROR_STATUS_CODES",
    "ClientHooks",
    "RequestConfig",
    "apply_request_hook",
    "invoke_hook",
]

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from aresult.exceptions import ExchangeError

logger: logging.Logger = logging.getLogger(__name__)

AUTH_ERROR_STATUS_CODES = (401, 403)


@dataclass(frozen=True)
class RequestConfig:
    """Description of an outgoing request, as seen by ``on_request``.

    Attributes:
        method: The HTTP method (e.g., "GET", "POST").
        url: The request path or absolute URL.
        params: Query parameters.
        headers: Request headers.
        timeout: Timeout in seconds, or ``None`` for the client default.
        data: The request payload (JSON body, raw content, or multipart
            parts).
        response_type: How the response body is decoded.
    """

    method: str
    url: str
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = None
    data: Any = None
    response_type: str = "json"


@dataclass(frozen=True)
class ClientHooks:
    """Optional hooks invoked around every exchange.

    Attributes:
        on_request: Receives the ``RequestConfig``; may return a
            replacement ``RequestConfig`` or a mapping of fields.
        on_response: Observes successful responses.
        on_error: Observes every failed exchange.
        on_auth_error: Observes failures with status 401 or 403. It also
            receives the transport, e.g. to refresh credentials.
    """

    on_request: Callable[[RequestConfig], RequestConfig | Mapping[str, Any] | None] | None = None
    on_response: Callable[[httpx.Response], None] | None = None
    on_error: Callable[[ExchangeError], None] | None = None
    on_auth_error: Callable[[ExchangeError, Any], None] | None = None


def invoke_hook(name: str, hook: Callable[..., Any] | None, *args: Any) -> Any:
    """Invoke a hook, logging and suppressing any exception it raises.

    Args:
        name: Hook name used in the log message.
        hook: The hook to invoke, or ``None``.
        *args: Positional arguments passed to the hook.

    Returns:
        The value returned by the hook, or ``None`` if the hook is
        missing or raised.

    Example:
        ```pycon
        >>> from aresult.callbacks import invoke_hook
        >>> invoke_hook("on_response", lambda response: 42, None)
        42
        >>> invoke_hook("on_response", lambda response: 1 / 0, None)  # logged, not raised

        ```
    """
    if hook is None:
        return None
    try:
        return hook(*args)
    except Exception:  # noqa: BLE001
        logger.warning(f"Error in {name} hook", exc_info=True)
        return None


def apply_request_hook(
    hook: Callable[[RequestConfig], RequestConfig | Mapping[str, Any] | None] | None,
    config: RequestConfig,
) -> RequestConfig:
    """Run the ``on_request`` hook and merge its answer over ``config``.

    Args:
        hook: The ``on_request`` hook, or ``None``.
        config: The outgoing request.

    Returns:
        ``config`` with the hook's changes applied. Unknown keys and
        answers that cannot be merged are logged and ignored.
    """
    modified = invoke_hook("on_request", hook, config)
    if modified is None:
        return config
    if isinstance(modified, RequestConfig):
        return modified
    if not isinstance(modified, Mapping):
        logger.warning(
            f"Ignoring on_request hook result of type {type(modified).__qualname__}"
        )
        return config
    known = {f.name for f in fields(RequestConfig)}
    unknown = sorted(str(key) for key in modified if key not in known)
    if unknown:
        logger.warning(f"Ignoring unknown request field(s) from on_request hook: {unknown}")
    return replace(config, **{k: v for k, v in modified.items() if k in known})
