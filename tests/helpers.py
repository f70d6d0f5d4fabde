r"""Shared test helpers for client, resource and transport tests.

This module contains common test infrastructure used across multiple
test files to reduce duplication and improve maintainability.
"""

from __future__ import annotations

__all__ = [
    "BASE_URL",
    "RecordingHandler",
    "create_client",
    "json_response",
]

from typing import TYPE_CHECKING, Any

import httpx

from aresult import ApiClient

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

BASE_URL = "https://api.example.com"


def json_response(status_code: int = 200, payload: Any = None, **kwargs: Any) -> httpx.Response:
    """Create an httpx response with a JSON body."""
    return httpx.Response(status_code, json=payload, **kwargs)


class RecordingHandler:
    """MockTransport handler replaying a sequence of outcomes.

    Each item is either an ``httpx.Response`` to copy or an exception to
    raise. The last item is repeated once the sequence is exhausted.
    Every received request is recorded in ``requests``.
    """

    def __init__(self, outcomes: Sequence[httpx.Response | Exception]) -> None:
        self._outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        index = min(len(self.requests), len(self._outcomes)) - 1
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(
            outcome.status_code, headers=outcome.headers, content=outcome.content
        )

    @property
    def call_count(self) -> int:
        return len(self.requests)


def create_client(
    handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any
) -> ApiClient:
    """Create an ``ApiClient`` served by ``httpx.MockTransport``."""
    kwargs.setdefault("base_url", BASE_URL)
    return ApiClient(transport=httpx.MockTransport(handler), **kwargs)
