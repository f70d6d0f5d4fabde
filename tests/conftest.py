from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from aresult.exchange import ExchangeResponse

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_response() -> ExchangeResponse:
    """Create a successful exchange response for testing."""
    return ExchangeResponse(status_code=200, headers=httpx.Headers(), data={"id": 1})


@pytest.fixture
def mock_exchange(mock_response: ExchangeResponse) -> AsyncMock:
    """Create a mock exchange function returning a successful response."""
    return AsyncMock(return_value=mock_response)


@pytest.fixture
def abort_signal() -> asyncio.Event:
    """Create an abort signal that has not fired."""
    return asyncio.Event()


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock hook for testing hook invocation."""
    return Mock()
