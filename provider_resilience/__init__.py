"""provider_resilience package

Resilience layer between application code and remote AI-provider HTTP APIs.

Purpose:
    Classify every failure of a provider call into a small taxonomy, decide
    whether it is worth retrying, schedule retries with backoff, and throttle
    outbound request rate per provider.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError` and its variants, :class:`ErrorCode`
    - Classification: :func:`classify`
    - Admission / retry: :class:`RateLimiter`, :func:`create_rate_limiter`,
      :class:`RetryPolicy`, :class:`RetryHandler`, :func:`with_retry`
    - HTTP binding: :class:`ResilientHttpClient`
    - Configuration: :func:`get_resilience_config`, :func:`build_retry_policy`

Notes:
    - Configuration sources and environment variables are documented in
      :mod:`provider_resilience.config`.
"""

from .base.errors import (
    AuthError,
    CapabilityError,
    ClientError,
    ErrorCode,
    ProviderError,
    QuotaError,
    TransientError,
    classify,
)
from .base.resilience import (
    DEFAULT_RETRY_POLICY,
    RateLimiter,
    RateLimiterResetError,
    RetryHandler,
    RetryPolicy,
    create_rate_limiter,
    with_retry,
)
from .base.http import ResilientHttpClient
from .config import build_retry_policy, get_resilience_config

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ErrorCode",
    "ProviderError",
    "AuthError",
    "ClientError",
    "CapabilityError",
    "TransientError",
    "QuotaError",
    "classify",
    "RateLimiter",
    "RateLimiterResetError",
    "create_rate_limiter",
    "RetryPolicy",
    "DEFAULT_RETRY_POLICY",
    "RetryHandler",
    "with_retry",
    "ResilientHttpClient",
    "get_resilience_config",
    "build_retry_policy",
]
