r"""Structured logging utilities for machine-readable log output.

The execution wrapper attaches retry fields (``attempt``,
``max_attempts``, ``wait_ms``, ``status_code``, ``code``) to its log
records through ``log_structured``. With the standard formatter these
fields are invisible; with ``StructuredFormatter`` every record is
emitted as one JSON object, which suits log aggregation systems.

Example:
    Enable structured logging for aresult:

    ```python
    import logging
    from aresult.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("aresult")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Tag every record emitted while serving one inbound request:

    ```python
    from aresult.utils.structured_logging import correlation_id

    with correlation_id("request-123"):
        result = await client.get_one("/users/1")
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

# Context variable for correlation ID (thread-safe and async-safe)
_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "aresult_correlation_id", default=None
)

# Attributes every LogRecord carries; anything else came from ``extra``
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


def get_correlation_id() -> str | None:
    """Get the correlation ID of the current context, or None."""
    return _correlation_id.get()


def set_correlation_id(value: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        value: The correlation ID (e.g. an inbound request ID).

    Example:
        ```pycon
        >>> from aresult.utils.structured_logging import (
        ...     clear_correlation_id,
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("request-456")
        >>> get_correlation_id()
        'request-456'
        >>> clear_correlation_id()

        ```
    """
    _correlation_id.set(value)


def clear_correlation_id() -> None:
    """Clear the correlation ID for the current context."""
    _correlation_id.set(None)


@contextmanager
def correlation_id(value: str) -> Iterator[None]:
    """Set a correlation ID for the duration of a ``with`` block.

    The previous value is restored on exit, so blocks can be nested.

    Args:
        value: The correlation ID.
    """
    token = _correlation_id.set(value)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 timestamp (UTC, millisecond precision)
        - level: Log level name
        - logger: Logger name
        - message: Log message
        - correlation_id: Correlation ID, if one is set
        - module, function, line: Origin of the record
        - exception: Formatted traceback, if any

    Fields passed through ``extra`` are added as top-level keys. Values
    that are not JSON serializable are rendered with ``repr``.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from aresult.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("test_structured_formatter")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Retrying", extra={"attempt": 2})
        >>> '"attempt": 2' in stream.getvalue()
        True

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        current_id = get_correlation_id()
        if current_id is not None:
            log_data["correlation_id"] = current_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=repr)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured fields.

    ``None`` values are dropped so that absent fields do not show up as
    ``null`` in the JSON output.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.DEBUG).
        message: Log message.
        **extra: Structured fields to attach to the record.
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(level, message, extra={k: v for k, v in extra.items() if v is not None})
