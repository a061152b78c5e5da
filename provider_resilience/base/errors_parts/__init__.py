"""Errors parts package public surface.

Re-exports individual taxonomy components for optional direct imports.
Prefer importing from `provider_resilience.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .auth_error import AuthError
from .client_error import ClientError
from .capability_error import CapabilityError
from .transient_error import TransientError
from .quota_error import QuotaError
from .classification import (
    ErrorDetails,
    classify,
    classify_exception,
    classify_response,
    extract_error_details,
    parse_retry_after,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "AuthError",
    "ClientError",
    "CapabilityError",
    "TransientError",
    "QuotaError",
    "ErrorDetails",
    "classify",
    "classify_exception",
    "classify_response",
    "extract_error_details",
    "parse_retry_after",
]
