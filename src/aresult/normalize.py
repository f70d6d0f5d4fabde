r"""Normalization of exchange outcomes into results.

Every exchange ends here: a successful ``ExchangeResponse`` becomes a
``Success`` and any exception becomes a ``Failure``. Payloads that
already follow the ``{"status": ..., "data": ...}`` contract are passed
through. To avoid swallowing a domain payload that merely happens to
contain a ``status`` field, a payload is only treated as canonical when
its keys are exactly ``status`` and ``data`` and ``status`` is a bool.
"""

from __future__ import annotations

__all__ = ["DEFAULT_ERROR_MESSAGE", "is_canonical", "normalize_error", "normalize_success"]

import logging
from collections.abc import Mapping
from typing import Any

from aresult.exchange import ExchangeResponse
from aresult.result import ErrorInfo, Failure, Success

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Request failed"

_CANONICAL_KEYS = frozenset({"status", "data"})


def is_canonical(payload: Any, status: bool) -> bool:
    """Indicate whether a payload already follows the result contract.

    Args:
        payload: The decoded payload.
        status: The expected discriminant value.

    Returns:
        ``True`` if ``payload`` is a mapping whose keys are exactly
        ``status`` and ``data`` and whose ``status`` is ``status``.

    Example:
        ```pycon
        >>> from aresult.normalize import is_canonical
        >>> is_canonical({"status": True, "data": [1, 2]}, status=True)
        True
        >>> is_canonical({"status": "active", "data": [1, 2]}, status=True)
        False
        >>> is_canonical({"status": True, "data": [1, 2], "page": 1}, status=True)
        False

        ```
    """
    return (
        isinstance(payload, Mapping)
        and set(payload.keys()) == _CANONICAL_KEYS
        and payload["status"] is status
    )


def normalize_success(outcome: ExchangeResponse | Any) -> Success[Any]:
    """Convert a successful exchange outcome into a ``Success``.

    Args:
        outcome: An ``ExchangeResponse``, an existing ``Success``, or a
            raw payload.

    Returns:
        The canonical payload unchanged, or the raw payload wrapped as
        ``data``.

    Example:
        ```pycon
        >>> from aresult.normalize import normalize_success
        >>> normalize_success({"id": 1})
        Success(data={'id': 1})
        >>> normalize_success({"status": True, "data": {"id": 1}})
        Success(data={'id': 1})

        ```
    """
    if isinstance(outcome, Success):
        return outcome
    payload = outcome.data if isinstance(outcome, ExchangeResponse) else outcome
    if is_canonical(payload, status=True):
        return Success(data=payload["data"])
    return Success(data=payload)


def normalize_error(error: BaseException | Failure) -> Failure:
    """Convert a failed exchange into a ``Failure``.

    The message is taken from the first non-empty string among the
    body's ``message`` field, the body's ``error`` field, the exception
    message and ``"Request failed"``. Fields of a structured error body
    are kept as extra fields, the HTTP status and the transport code
    are attached when available.

    Args:
        error: The exception raised by the exchange. Any exception is
            accepted; attributes missing on foreign exceptions are
            treated as absent.

    Returns:
        The normalized failure.

    Example:
        ```pycon
        >>> from aresult.exceptions import ExchangeError
        >>> from aresult.normalize import normalize_error
        >>> failure = normalize_error(
        ...     ExchangeError("Request failed with status code 422",
        ...                   status_code=422, body={"error": "invalid email", "field": "email"})
        ... )
        >>> failure.to_dict()
        {'status': False, 'data': {'error': 'invalid email', 'field': 'email', 'message': 'invalid email', 'statusCode': 422}}

        ```
    """
    if isinstance(error, Failure):
        return error

    body = getattr(error, "body", None)
    if is_canonical(body, status=False):
        return Failure(data=body["data"])

    structured = body if isinstance(body, Mapping) else {}
    message = _first_message(
        structured.get("message"),
        structured.get("error"),
        getattr(error, "message", None),
        str(error),
    )
    status_code = getattr(error, "status_code", None)
    code = getattr(error, "code", None)
    info = ErrorInfo(
        message=message,
        status_code=status_code if isinstance(status_code, int) and status_code else None,
        code=code if isinstance(code, str) and code else None,
        extra={k: v for k, v in structured.items() if isinstance(k, str)},
    )
    logger.debug(f"Normalized {type(error).__name__} into failure: {message}")
    return Failure(data=info)


def _first_message(*candidates: Any) -> str:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate
    return DEFAULT_ERROR_MESSAGE
