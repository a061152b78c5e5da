"""Provider error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``provider_resilience.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.auth_error import AuthError
from .errors_parts.client_error import ClientError
from .errors_parts.capability_error import CapabilityError
from .errors_parts.transient_error import TransientError
from .errors_parts.quota_error import QuotaError
from .errors_parts.classification import (
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
