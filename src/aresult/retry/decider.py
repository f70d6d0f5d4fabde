r"""Retry decision logic.

This module decides whether a failed exchange deserves another attempt.
Client errors are deterministic for a given request and are never
retried; server errors and connectivity failures may be transient.
"""

from __future__ import annotations

__all__ = ["is_retriable"]

import logging

from aresult.exceptions import ABORTED_CODE, BAD_OPTION_CODE

logger: logging.Logger = logging.getLogger(__name__)

# Failures that repeat identically on every attempt
_TERMINAL_CODES = (ABORTED_CODE, BAD_OPTION_CODE)


def is_retriable(error: BaseException) -> bool:
    """Determine whether a failed exchange should be retried.

    The rules are, in order:

    - an aborted exchange (``code == "ERR_CANCELED"``) or a request that
      could not be built (``code == "ERR_BAD_OPTION_VALUE"``) is terminal,
    - a failure without an integer HTTP status (network error, timeout,
      DNS failure, unexpected crash) is retriable,
    - a 5xx status is retriable,
    - any other status is terminal.

    Args:
        error: The exception raised by the exchange.

    Returns:
        ``True`` if the exchange should be attempted again.

    Example:
        ```pycon
        >>> from aresult.exceptions import ExchangeAbortedError, ExchangeError
        >>> from aresult.retry.decider import is_retriable
        >>> is_retriable(ExchangeError("boom"))
        True
        >>> is_retriable(ExchangeError("unavailable", status_code=503))
        True
        >>> is_retriable(ExchangeError("not found", status_code=404))
        False
        >>> is_retriable(ExchangeAbortedError())
        False

        ```
    """
    if getattr(error, "code", None) in _TERMINAL_CODES:
        return False
    status_code = getattr(error, "status_code", None)
    # Foreign exceptions may carry a status of another type
    if isinstance(status_code, bool) or not isinstance(status_code, int) or not status_code:
        return True
    return 500 <= status_code < 600
