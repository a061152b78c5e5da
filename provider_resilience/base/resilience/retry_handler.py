"""Retry orchestration for async provider operations.

Purpose
-------
Run a zero-argument async operation under a :class:`RetryPolicy`: attempt it,
classify any failure into the provider error taxonomy, ask the policy whether
to retry, wait for the backoff delay (or the provider's ``Retry-After`` hint
when that is later) and try again.

Failure semantics
-----------------
- Attempts of a single ``execute`` call are strictly sequential.
- When retries are exhausted or refused, the error from the most recent
  attempt is raised as-is (classified, chained to the raw exception). There is
  no "gave up" wrapper.
- ``asyncio.CancelledError`` and other ``BaseException`` subclasses are never
  intercepted; cancelling the calling task also cancels a pending backoff.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar

from ..errors import ProviderError, QuotaError, classify
from ..logging import LogContext, get_logger, normalized_log_event
from ..utils.clock import utc_now
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy

T = TypeVar("T")

_logger = get_logger("provider_resilience.retry")


class RetryHandler:
    """Execute async operations with classification-driven retries.

    Parameters
    ----------
    policy:
        The retry policy deciding eligibility and backoff.
    provider:
        Provider id stamped on errors the handler classifies.
    sleep:
        Awaitable sleep used between attempts; injectable for tests.
    clock:
        Wall clock used to evaluate ``QuotaError.retry_after``.
    """

    def __init__(
        self,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        *,
        provider: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.policy = policy
        self.provider = provider
        self._sleep = sleep
        self._clock = clock

    def _delay_for(self, error: ProviderError, attempt_index: int) -> float:
        delay = self.policy.next_delay(attempt_index)
        if isinstance(error, QuotaError) and error.retry_after is not None:
            hinted = (error.retry_after - self._clock()).total_seconds()
            if hinted > delay:
                delay = hinted
        return delay

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` until it succeeds or the policy stops retrying.

        Returns the operation's result. Raises the classified error of the
        last failed attempt.
        """
        ctx = LogContext(provider=self.provider, operation=getattr(operation, "__name__", None))
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as raw:
                error = classify(raw, self.provider)
                if not self.policy.can_retry(error, attempt):
                    normalized_log_event(
                        _logger,
                        "retry.giveup",
                        ctx,
                        phase="giveup",
                        attempt=attempt,
                        error_code=error.code,
                        level=logging.WARNING,
                        error_type=type(error).__name__,
                        max_attempts=self.policy.max_attempts,
                    )
                    if error is raw:
                        raise
                    raise error from raw
                delay = self._delay_for(error, attempt)
                normalized_log_event(
                    _logger,
                    "retry.scheduled",
                    ctx,
                    phase="retry",
                    attempt=attempt,
                    error_code=error.code,
                    level=logging.INFO,
                    error_type=type(error).__name__,
                    delay_seconds=round(delay, 3),
                    max_attempts=self.policy.max_attempts,
                )
            await self._sleep(delay)
            attempt += 1


def with_retry(
    policy: RetryPolicy = DEFAULT_RETRY_POLICY, *, provider: Optional[str] = None
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Return a decorator running an async function under :class:`RetryHandler`.

    The wrapped function's arguments are bound once and replayed unchanged on
    every attempt.
    """
    handler = RetryHandler(policy, provider=provider)

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await handler.execute(functools.partial(func, *args, **kwargs))

        return wrapper

    return decorator


__all__ = ["RetryHandler", "with_retry"]
