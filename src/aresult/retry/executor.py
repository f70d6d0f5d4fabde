r"""Execution wrapper: retry loop with normalized results.

This module provides ``run`` and ``run_with_outcome``, which invoke an
exchange function repeatedly according to a retry policy and always
terminate with a ``Success`` or ``Failure`` result. Failures raised by
the exchange are never propagated to the caller.
"""

from __future__ import annotations

__all__ = ["ExecutionOutcome", "UNEXPECTED_ERROR_MESSAGE", "run", "run_with_outcome"]

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

from aresult.backoff import compute_backoff
from aresult.core.config import DEFAULT_RETRY_POLICY, RetryPolicy, resolve_retry_policy
from aresult.normalize import normalize_error, normalize_success
from aresult.result import ErrorInfo, Failure
from aresult.retry.decider import is_retriable
from aresult.utils.sleep import sleep_ms
from aresult.utils.structured_logging import log_structured

if TYPE_CHECKING:
    import asyncio

    from aresult.core.config import RetryOverride
    from aresult.exchange import Exchange, ExchangeResponse
    from aresult.result import Result

logger: logging.Logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected client error"


class ExecutionOutcome(NamedTuple):
    """Final state of an execution.

    Attributes:
        result: The normalized result.
        response: The successful exchange response, or ``None`` if the
            execution failed.
    """

    result: Result[Any]
    response: ExchangeResponse | None = None


async def run_with_outcome(
    exchange: Exchange,
    retry: RetryOverride = None,
    *,
    base: RetryPolicy = DEFAULT_RETRY_POLICY,
    signal: asyncio.Event | None = None,
    description: str = "request",
) -> ExecutionOutcome:
    """Execute an exchange with automatic retry logic.

    Attempts the exchange up to ``1 + retries`` times. A success returns
    immediately. A failure is retried only while attempts remain and
    ``is_retriable`` accepts it, waiting ``compute_backoff(attempt)``
    milliseconds in between. The wait is interrupted when ``signal``
    fires; the next exchange is then expected to fail with an abort,
    which is terminal.

    Args:
        exchange: Zero-argument coroutine function performing one
            exchange.
        retry: Caller override merged field-by-field onto ``base``.
        base: The policy providing the fields ``retry`` leaves out.
        signal: Optional abort signal shared by all attempts.
        description: Label used in log messages (e.g. ``"GET /users"``).

    Returns:
        The normalized result together with the successful response.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresult.exchange import ExchangeResponse
        >>> from aresult.retry.executor import run_with_outcome
        >>> async def exchange():
        ...     return ExchangeResponse(status_code=200, data={"id": 1})
        ...
        >>> outcome = asyncio.run(run_with_outcome(exchange))
        >>> outcome.result
        Success(data={'id': 1})
        >>> outcome.response.status_code
        200

        ```
    """
    try:
        policy = resolve_retry_policy(retry, base=base)
    except (TypeError, ValueError) as exc:
        logger.debug(f"{description}: invalid retry configuration: {exc}")
        error = ErrorInfo(message=f"Invalid retry configuration: {exc}")
        return ExecutionOutcome(Failure(data=error))

    max_attempts = policy.max_attempts
    attempt = 0
    while attempt < max_attempts:
        try:
            response = await exchange()
        except Exception as exc:  # noqa: BLE001
            attempt += 1
            status_code = getattr(exc, "status_code", None)
            code = getattr(exc, "code", None)
            if attempt >= max_attempts or not is_retriable(exc):
                log_structured(
                    logger,
                    logging.DEBUG,
                    f"{description} failed on attempt {attempt}/{max_attempts}: {exc}",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    status_code=status_code,
                    code=code,
                )
                return ExecutionOutcome(normalize_error(exc))

            wait = compute_backoff(attempt, policy)
            log_structured(
                logger,
                logging.DEBUG,
                f"{description} failed on attempt {attempt}/{max_attempts} "
                f"({type(exc).__name__}), retrying in {wait}ms",
                attempt=attempt,
                max_attempts=max_attempts,
                wait_ms=wait,
                status_code=status_code,
                code=code,
            )
            await sleep_ms(wait, signal=signal)
        else:
            log_structured(
                logger,
                logging.DEBUG,
                f"{description} succeeded on attempt {attempt + 1}/{max_attempts}",
                attempt=attempt + 1,
                max_attempts=max_attempts,
                status_code=getattr(response, "status_code", None),
            )
            return ExecutionOutcome(normalize_success(response), response)

    return ExecutionOutcome(  # pragma: no cover
        Failure(data=ErrorInfo(message=UNEXPECTED_ERROR_MESSAGE))
    )


async def run(
    exchange: Exchange,
    retry: RetryOverride = None,
    *,
    base: RetryPolicy = DEFAULT_RETRY_POLICY,
    signal: asyncio.Event | None = None,
    description: str = "request",
) -> Result[Any]:
    """Execute an exchange with automatic retry logic.

    Same as ``run_with_outcome`` but returns only the result.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresult.exceptions import ExchangeError
        >>> from aresult.retry.executor import run
        >>> async def exchange():
        ...     raise ExchangeError("Request failed with status code 404", status_code=404)
        ...
        >>> asyncio.run(run(exchange, {"retries": 3})).to_dict()
        {'status': False, 'data': {'message': 'Request failed with status code 404', 'statusCode': 404}}

        ```
    """
    outcome = await run_with_outcome(
        exchange, retry, base=base, signal=signal, description=description
    )
    return outcome.result
