r"""Cancellable waits between retry attempts."""

from __future__ import annotations

__all__ = ["sleep_ms"]

import asyncio
import logging

logger: logging.Logger = logging.getLogger(__name__)


async def sleep_ms(delay_ms: float, signal: asyncio.Event | None = None) -> bool:
    """Wait for ``delay_ms`` milliseconds, or until ``signal`` is set.

    Without a signal this is a plain ``asyncio.sleep``. With a signal,
    the wait ends as soon as the signal fires, so a cancelled request
    does not sit out the remaining backoff.

    Args:
        delay_ms: The delay in milliseconds. Non-positive delays return
            immediately.
        signal: Optional abort signal.

    Returns:
        ``True`` if the full delay elapsed, ``False`` if the signal
        interrupted it.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresult.utils.sleep import sleep_ms
        >>> asyncio.run(sleep_ms(1))
        True
        >>> signal = asyncio.Event()
        >>> signal.set()
        >>> asyncio.run(sleep_ms(10_000, signal=signal))
        False

        ```
    """
    if signal is not None and signal.is_set():
        return False
    seconds = max(0.0, delay_ms / 1000)
    if signal is None:
        await asyncio.sleep(seconds)
        return True
    try:
        await asyncio.wait_for(signal.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return True
    logger.debug(f"Backoff of {delay_ms}ms interrupted by abort signal")
    return False
