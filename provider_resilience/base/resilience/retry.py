"""Retry policy: how long to wait between attempts and which errors to retry.

:class:`RetryPolicy` is an immutable value. ``next_delay`` gives the
exponential backoff (capped, with up to 10% positive jitter) before the retry
following a failed attempt; ``can_retry`` applies the attempt budget, then the
default matrix (transient and quota errors retry), then an optional additive
:class:`RetryPredicate`.
"""
from __future__ import annotations

import dataclasses
import math
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, ClassVar, Optional, Protocol, Union

from ..errors import (
    AuthError,
    CapabilityError,
    ClientError,
    QuotaError,
    TransientError,
)
from ...config.defaults import (
    RETRY_DEFAULT_INITIAL_DELAY,
    RETRY_DEFAULT_MAX_ATTEMPTS,
    RETRY_DEFAULT_MAX_DELAY,
    RETRY_DEFAULT_MULTIPLIER,
)

Duration = Union[float, int, timedelta]


class RetryPredicate(Protocol):  # pragma: no cover - structural protocol
    """Strategy that can force a retry the default matrix would refuse."""

    def __call__(self, error: BaseException) -> bool: ...


def _seconds(name: str, value: Duration) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be seconds or a timedelta, got {type(value).__name__}")
    return float(value)


@dataclass(frozen=True)
class RetryPolicy:
    """Static retry configuration and the decisions derived from it.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1).
        initial_delay: Delay before the first retry, in seconds (>= 0).
        max_delay: Upper bound for any computed delay (>= initial_delay).
        multiplier: Exponential growth factor between retries (> 0).
        should_retry: Optional predicate that may force a retry. It is
            additive only: returning False never vetoes a retry the default
            matrix allows.

    Out-of-range values raise ``ValueError`` at construction; a duration of
    the wrong type or a non-callable ``should_retry`` raises ``TypeError``.
    """

    JITTER_RATIO: ClassVar[float] = 0.1

    max_attempts: int = RETRY_DEFAULT_MAX_ATTEMPTS
    initial_delay: float = RETRY_DEFAULT_INITIAL_DELAY
    max_delay: float = RETRY_DEFAULT_MAX_DELAY
    multiplier: float = RETRY_DEFAULT_MULTIPLIER
    should_retry: Optional[RetryPredicate] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "initial_delay", _seconds("initial_delay", self.initial_delay))
        object.__setattr__(self, "max_delay", _seconds("max_delay", self.max_delay))
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError(f"max_attempts must be an integer >= 1, got {self.max_attempts!r}")
        if isinstance(self.multiplier, bool) or not isinstance(self.multiplier, (int, float)) or not self.multiplier > 0:
            raise ValueError(f"multiplier must be greater than 0, got {self.multiplier!r}")
        if not self.initial_delay >= 0:
            raise ValueError(f"initial_delay cannot be negative, got {self.initial_delay!r}")
        if not self.max_delay >= 0:
            raise ValueError(f"max_delay cannot be negative, got {self.max_delay!r}")
        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})"
            )
        if self.should_retry is not None and not callable(self.should_retry):
            raise TypeError("should_retry must be callable")

    @classmethod
    def defaults(cls) -> "RetryPolicy":
        return cls()

    def replace(self, **changes: Any) -> "RetryPolicy":
        """Return a copy with ``changes`` applied (validated like a new policy)."""
        return dataclasses.replace(self, **changes)

    def next_delay(self, attempt_index: int) -> float:
        """Backoff in seconds before retry number ``attempt_index`` (zero-based).

        ``initial_delay * multiplier ** attempt_index`` plus 0-10% jitter,
        capped at ``max_delay``.
        """
        if attempt_index < 0:
            raise ValueError(f"attempt_index must be >= 0, got {attempt_index}")
        if self.initial_delay == 0:
            return 0.0
        try:
            base = self.initial_delay * (self.multiplier ** attempt_index)
        except OverflowError:
            base = math.inf
        if base >= self.max_delay:
            return self.max_delay
        jitter = random.uniform(0.0, base * self.JITTER_RATIO)  # nosec B311 - jitter, not crypto
        return min(base + jitter, self.max_delay)

    def can_retry(self, error: BaseException, attempt_index: int) -> bool:
        """Whether a failure on attempt ``attempt_index`` should be retried.

        Exhausted budget always refuses. Otherwise a configured predicate may
        force a retry; failing that, transient and quota errors retry and
        every other kind does not.
        """
        if attempt_index < 0:
            raise ValueError(f"attempt_index must be >= 0, got {attempt_index}")
        if attempt_index >= self.max_attempts - 1:
            return False
        if self.should_retry is not None and self.should_retry(error):
            return True
        if isinstance(error, (AuthError, ClientError, CapabilityError)):
            return False
        return isinstance(error, (TransientError, QuotaError))

    def __str__(self) -> str:
        mode = "custom" if self.should_retry is not None else "default"
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, initial_delay={self.initial_delay}s, "
            f"max_delay={self.max_delay}s, multiplier={self.multiplier}, should_retry={mode})"
        )


DEFAULT_RETRY_POLICY = RetryPolicy()


__all__ = [
    "RetryPolicy",
    "RetryPredicate",
    "DEFAULT_RETRY_POLICY",
]
