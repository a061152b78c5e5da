"""Admission control and retry orchestration for provider calls."""

from .rate_limiter import RateLimiter, RateLimiterResetError
from .rate_limiter_factory import create_rate_limiter
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, RetryPredicate
from .retry_handler import RetryHandler, with_retry
from .error_handling import classify_errors

__all__ = [
    "RateLimiter",
    "RateLimiterResetError",
    "create_rate_limiter",
    "RetryPolicy",
    "RetryPredicate",
    "DEFAULT_RETRY_POLICY",
    "RetryHandler",
    "with_retry",
    "classify_errors",
]
