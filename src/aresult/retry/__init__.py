r"""Retry classification and the execution wrapper."""

from __future__ import annotations

__all__ = ["ExecutionOutcome", "is_retriable", "run", "run_with_outcome"]

from aresult.retry.decider import is_retriable
from aresult.retry.executor import ExecutionOutcome, run, run_with_outcome
