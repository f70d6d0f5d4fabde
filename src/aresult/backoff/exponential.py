r"""Exponential backoff strategy with downward jitter."""

from __future__ import annotations

__all__ = ["ExponentialBackoff", "compute_backoff"]

import math
import random
from typing import TYPE_CHECKING

from aresult.backoff.base import BaseBackoffStrategy

if TYPE_CHECKING:
    from aresult.core.config import RetryPolicy

# Largest fraction of the exponential delay removed by jitter
JITTER_RATIO = 0.3


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: min(max_delay_ms, base_delay_ms * 2 ** (attempt - 1)).
    With jitter enabled, a uniformly random amount of up to 30% of that
    delay is subtracted and the result is floored to whole milliseconds,
    so the delay always lies within [0.7 * delay, delay].

    Args:
        base_delay_ms: Delay after the first failed attempt, in
            milliseconds. Must be > 0.
        max_delay_ms: Cap on the delay in milliseconds. Must be
            >= base_delay_ms.
        jitter: Whether to randomize the delay downwards.

    Example:
        ```pycon
        >>> from aresult.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay_ms=300, max_delay_ms=2000, jitter=False)
        >>> backoff.calculate(1)
        300
        >>> backoff.calculate(2)
        600
        >>> backoff.calculate(3)
        1200
        >>> backoff.calculate(4)  # Would be 2400, but capped
        2000

        ```
    """

    def __init__(
        self, base_delay_ms: float = 300, max_delay_ms: float = 2000, jitter: bool = True
    ) -> None:
        if base_delay_ms <= 0:
            msg = f"base_delay_ms must be positive, got {base_delay_ms}"
            raise ValueError(msg)
        if max_delay_ms < base_delay_ms:
            msg = f"max_delay_ms must be >= base_delay_ms, got {max_delay_ms}"
            raise ValueError(msg)

        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.jitter = jitter

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(base_delay_ms={self.base_delay_ms}, "
            f"max_delay_ms={self.max_delay_ms}, jitter={self.jitter})"
        )

    def calculate(self, attempt: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            attempt: The number of the attempt that just failed (1-indexed).

        Returns:
            The delay in milliseconds.

        Raises:
            ValueError: If attempt < 1.
        """
        if attempt < 1:
            msg = f"attempt must be >= 1, got {attempt}"
            raise ValueError(msg)
        delay = self._exponential_delay(attempt)
        if not self.jitter:
            return delay
        rand = random.random() * delay * JITTER_RATIO  # noqa: S311
        return min(self.max_delay_ms, math.floor(delay - rand))

    def _exponential_delay(self, attempt: int) -> float:
        # Once base * 2 ** (attempt - 1) exceeds the cap it is never computed
        if attempt - 1 > math.log2(self.max_delay_ms / self.base_delay_ms):
            return self.max_delay_ms
        try:
            return min(self.max_delay_ms, self.base_delay_ms * 2 ** (attempt - 1))
        except OverflowError:
            return self.max_delay_ms

    @classmethod
    def from_policy(cls, policy: RetryPolicy) -> ExponentialBackoff:
        return cls(
            base_delay_ms=policy.base_delay_ms,
            max_delay_ms=policy.max_delay_ms,
            jitter=policy.jitter,
        )


def compute_backoff(attempt: int, policy: RetryPolicy) -> float:
    """Compute the wait before the next attempt.

    Args:
        attempt: The number of the attempt that just failed (1-indexed).
        policy: The retry policy providing the delays and jitter flag.

    Returns:
        The delay in milliseconds.

    Example:
        ```pycon
        >>> from aresult.backoff import compute_backoff
        >>> from aresult.core.config import RetryPolicy
        >>> policy = RetryPolicy(base_delay_ms=300, max_delay_ms=2000, jitter=False)
        >>> [compute_backoff(attempt, policy) for attempt in range(1, 6)]
        [300, 600, 1200, 2000, 2000]

        ```
    """
    return ExponentialBackoff.from_policy(policy).calculate(attempt)
