"""
Generic provider error codes.

Defines the `ErrorCode` enumeration used by the classifier when a provider
response carries no code of its own. Values are upper snake_case and are a
stable public contract for logging and analytics; provider-supplied codes
(e.g. ``"insufficient_quota"``) pass through unchanged and take precedence.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Fallback codes attached to classified errors."""

    RATE_LIMIT = "RATE_LIMIT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    SERVER_ERROR = "SERVER_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


__all__ = ["ErrorCode"]
