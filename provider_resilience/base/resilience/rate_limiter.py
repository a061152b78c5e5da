"""Token-bucket rate limiter with a FIFO wait queue.

Purpose
-------
Throttle outbound requests per provider so provider-side limits are not
tripped. One :class:`RateLimiter` is owned by one provider binding.

Algorithm
---------
- The bucket holds at most ``capacity`` tokens and starts full.
- Tokens accumulate continuously at ``capacity / window`` per second.
- :meth:`RateLimiter.acquire` refills, then consumes one token immediately
  when one is available and nobody is queued ahead; otherwise the caller is
  queued and a single timer is armed for the moment the next token is due.
- When the timer fires the bucket is refilled and as many queued callers as
  there are whole tokens are admitted, strictly in arrival order. The timer
  is re-armed while callers remain queued.

Concurrency model
-----------------
asyncio, single event loop. All state (tokens, last refill time, queue,
timer handle) is mutated only by this class from the loop thread, so no lock
is needed. Queued callers are cancelled by cancelling their task; a
cancelled caller never consumes a token.

A limiter may outlive the loop it was first used on (successive
``asyncio.run`` calls). The drain timer remembers its loop; a timer or queued
caller belonging to a loop that has ended is discarded, and the timer is
re-armed on the loop of the next queued caller.

Reset semantics
---------------
:meth:`RateLimiter.reset` refills the bucket and rejects every caller still
queued with :class:`RateLimiterResetError`, so nobody stays suspended on a
limiter that no longer tracks them.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import time
from collections import deque
from datetime import timedelta
from typing import Callable, Deque, Optional, Union

from ..logging import get_logger, log_event

_logger = get_logger("provider_resilience.rate_limiter")

# Floor for the drain timer so a sub-millisecond deficit cannot spin the loop.
_MIN_TIMER_DELAY = 0.001

Window = Union[float, int, timedelta]


class RateLimiterResetError(RuntimeError):
    """Raised inside callers that were still queued when the limiter was reset."""


def _stale(waiter: "asyncio.Future[None]") -> bool:
    """A queued future that can no longer be admitted."""
    return waiter.done() or waiter.get_loop().is_closed()


def _window_seconds(window: Window) -> float:
    if isinstance(window, timedelta):
        return window.total_seconds()
    if isinstance(window, bool) or not isinstance(window, (int, float)):
        raise TypeError(f"window must be seconds or a timedelta, got {type(window).__name__}")
    return float(window)


class RateLimiter:
    """Per-provider token-bucket admission gate.

    Parameters
    ----------
    capacity:
        Maximum number of tokens (burst size); also the number of requests
        allowed per ``window``. Must be a positive integer.
    window:
        Time to refill an empty bucket, in seconds or as a ``timedelta``.
        Must be positive and finite.
    clock:
        Monotonic clock returning seconds; injectable for tests.

    Raises
    ------
    ValueError
        If ``capacity`` or ``window`` is not strictly positive.
    """

    def __init__(
        self,
        capacity: int,
        window: Window,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        window_s = _window_seconds(window)
        if not (window_s > 0 and math.isfinite(window_s)):
            raise ValueError(f"window must be a positive, finite duration, got {window!r}")

        self._capacity = capacity
        self._window = window_s
        self._rate = capacity / window_s
        self._clock = clock
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._waiters: Deque[asyncio.Future[None]] = deque()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._timer_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window(self) -> float:
        """Refill window in seconds."""
        return self._window

    @property
    def available_tokens(self) -> float:
        """Current token count after refilling for elapsed time."""
        self._refill()
        return self._tokens

    @property
    def waiting_count(self) -> int:
        """Number of callers currently queued for a token."""
        return sum(1 for w in self._waiters if not _stale(w))

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it.

        Callers are admitted in call order. Cancelling the calling task while
        it is queued removes it from the queue without consuming a token.

        Raises
        ------
        RateLimiterResetError
            If :meth:`reset` is called while this caller is queued.
        """
        self._refill()
        self._prune()
        if not self._waiters and self._tokens >= 1.0:
            self._tokens -= 1.0
            return

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        self._waiters.append(waiter)
        log_event(
            _logger,
            "limiter.queued",
            level=logging.DEBUG,
            waiting=len(self._waiters),
            tokens=round(self._tokens, 3),
        )
        self._schedule_drain(loop)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Admitted in the same tick the task was cancelled.
                self._tokens = min(self._tokens + 1.0, float(self._capacity))
            else:
                with contextlib.suppress(ValueError):
                    self._waiters.remove(waiter)
                self._prune()
                if not self._waiters:
                    self._cancel_timer()
            raise

    def reset(self) -> None:
        """Restore full capacity, cancel the drain timer and reject queued callers."""
        self._cancel_timer()
        pending = [w for w in self._waiters if not _stale(w)]
        self._waiters.clear()
        self._tokens = float(self._capacity)
        self._last_refill = self._clock()
        for waiter in pending:
            waiter.set_exception(RateLimiterResetError("rate limiter was reset while waiting for a token"))
        if pending:
            log_event(_logger, "limiter.reset", level=logging.WARNING, rejected=len(pending))

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        self._tokens = min(self._tokens + elapsed * self._rate, float(self._capacity))
        self._last_refill = now

    def _prune(self) -> None:
        while self._waiters and _stale(self._waiters[0]):
            self._waiters.popleft()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._timer_loop = None

    def _schedule_drain(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._timer is not None:
            if self._timer_loop is loop and not loop.is_closed():
                return
            # Armed on a loop that has since ended; it will never fire.
            self._cancel_timer()
        if not self._waiters:
            return
        deficit = max(1.0 - self._tokens, 0.0)
        delay = max(deficit / self._rate, _MIN_TIMER_DELAY)
        self._timer = loop.call_later(delay, self._drain)
        self._timer_loop = loop

    def _drain(self) -> None:
        loop = self._timer_loop
        self._timer = None
        self._timer_loop = None
        self._refill()
        self._prune()
        while self._waiters and self._tokens >= 1.0:
            waiter = self._waiters.popleft()
            if _stale(waiter):
                continue
            self._tokens -= 1.0
            waiter.set_result(None)
        self._prune()
        if self._waiters and loop is not None:
            self._schedule_drain(loop)

    def __repr__(self) -> str:
        return (
            f"RateLimiter(capacity={self._capacity}, window={self._window}s, "
            f"available_tokens={self.available_tokens:.2f}, waiting={self.waiting_count})"
        )


__all__ = ["RateLimiter", "RateLimiterResetError"]
