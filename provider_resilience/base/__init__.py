"""
Resilience Base Package

Exports the provider-agnostic building blocks used by every provider binding:

- Errors: the closed failure taxonomy and the classifier mapping transport
  failures and HTTP responses onto it
- Resilience: token-bucket rate limiter, retry policy and retry handler
- HTTP: the rate-limited, retrying ``httpx.AsyncClient`` binding
"""

from .errors import (
    AuthError,
    CapabilityError,
    ClientError,
    ErrorCode,
    ProviderError,
    QuotaError,
    TransientError,
    classify,
    parse_retry_after,
)
from .resilience import (
    DEFAULT_RETRY_POLICY,
    RateLimiter,
    RateLimiterResetError,
    RetryHandler,
    RetryPolicy,
    RetryPredicate,
    classify_errors,
    create_rate_limiter,
    with_retry,
)
from .http import ResilientHttpClient

__all__ = [
    # Errors
    "ErrorCode",
    "ProviderError",
    "AuthError",
    "ClientError",
    "CapabilityError",
    "TransientError",
    "QuotaError",
    "classify",
    "parse_retry_after",
    # Resilience
    "RateLimiter",
    "RateLimiterResetError",
    "create_rate_limiter",
    "RetryPolicy",
    "RetryPredicate",
    "DEFAULT_RETRY_POLICY",
    "RetryHandler",
    "with_retry",
    "classify_errors",
    # HTTP
    "ResilientHttpClient",
]
