r"""Abstract base class for backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Abstract base class for backoff strategies.

    A backoff strategy determines how long to wait before the next
    attempt of a failed request, based on the attempt number.
    """

    @abstractmethod
    def calculate(self, attempt: int) -> float:
        """Calculate the backoff delay for a given attempt.

        Args:
            attempt: The number of the attempt that just failed
                (1-indexed). For example, attempt=1 is the wait after
                the initial request, attempt=2 the wait after the first
                retry, etc.

        Returns:
            The delay in milliseconds before the next attempt.
        """
