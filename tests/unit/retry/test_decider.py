r"""Unit tests for the retry decision logic."""

from __future__ import annotations

import pytest

from aresult.exceptions import (
    ExchangeAbortedError,
    ExchangeError,
    ExchangeNetworkError,
    ExchangeRequestError,
    ExchangeTimeoutError,
)
from aresult.retry import is_retriable


@pytest.mark.parametrize("status_code", [500, 502, 503, 504, 599])
def test_is_retriable_server_errors(status_code: int) -> None:
    """Test that 5xx statuses are retried."""
    assert is_retriable(ExchangeError("boom", status_code=status_code))


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 409, 422, 429, 499, 600])
def test_is_retriable_client_errors(status_code: int) -> None:
    """Test that statuses outside 5xx are terminal."""
    assert not is_retriable(ExchangeError("boom", status_code=status_code))


def test_is_retriable_network_error() -> None:
    assert is_retriable(ExchangeNetworkError())


def test_is_retriable_timeout() -> None:
    assert is_retriable(ExchangeTimeoutError())


def test_is_retriable_aborted() -> None:
    """Test that an aborted exchange is never retried."""
    assert not is_retriable(ExchangeAbortedError())


def test_is_retriable_aborted_with_status() -> None:
    assert not is_retriable(ExchangeAbortedError(status_code=503))


def test_is_retriable_foreign_exception() -> None:
    """Test that exceptions without status are treated as transient."""
    assert is_retriable(RuntimeError("unexpected"))
    assert is_retriable(ConnectionResetError())


@pytest.mark.parametrize("status_code", ["503", "404", 503.0, True, object()])
def test_is_retriable_non_integer_status(status_code: object) -> None:
    """Test that a status that is not an int is treated as absent."""
    error = RuntimeError("foreign")
    error.status_code = status_code  # type: ignore[attr-defined]
    assert is_retriable(error)


def test_is_retriable_request_build_failure() -> None:
    """Test that a request that cannot be built is never retried."""
    assert not is_retriable(ExchangeRequestError("Invalid request: not serializable"))
