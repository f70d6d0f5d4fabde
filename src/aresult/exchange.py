r"""Outcome of a single HTTP exchange.

An exchange is one attempt to perform the underlying HTTP operation. It
either returns an ``ExchangeResponse`` or raises an ``ExchangeError``
(see ``aresult.exceptions``).
"""

from __future__ import annotations

__all__ = ["Exchange", "ExchangeResponse"]

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass(frozen=True)
class ExchangeResponse:
    """Decoded successful response of one exchange.

    Args:
        status_code: The HTTP status code.
        headers: The response headers (case-insensitive).
        data: The body decoded according to the requested response type.
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    data: Any = None


Exchange = Callable[[], Awaitable[ExchangeResponse]]
