r"""Backoff strategies for retry delays."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff", "compute_backoff"]

from aresult.backoff.base import BaseBackoffStrategy
from aresult.backoff.exponential import ExponentialBackoff, compute_backoff
