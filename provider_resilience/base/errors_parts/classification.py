"""
Failure classification into the provider error taxonomy.

Turns raw transport failures (httpx / builtin exceptions) and HTTP error
responses into exactly one :class:`ProviderError` variant. Classification is
total: it never raises, and anything unrecognised degrades to
:class:`ClientError` with ``UNKNOWN_ERROR`` rather than being dropped.

Precedence:
    1. ``ProviderError`` passthrough (identity).
    2. HTTP status mapping (429 quota, 401/403 auth, >=500 transient,
       other statuses client).
    3. Timeouts and connection-level failures (transient).
    4. Response decode failures (client, ``PARSE_ERROR``).
    5. ``ClientError`` / ``UNKNOWN_ERROR`` fallback.
"""
from __future__ import annotations

import asyncio
import json
import re
import socket
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, NamedTuple, Optional

import httpx

from ..logging import get_logger
from ..utils.clock import utc_now
from .auth_error import AuthError
from .client_error import ClientError
from .error_code import ErrorCode
from .provider_error import ProviderError
from .quota_error import QuotaError
from .transient_error import TransientError

_logger = get_logger("provider_resilience.errors")

_DIGITS = re.compile(r"[0-9]+")

_CORRELATION_BODY_KEYS = ("request_id", "requestId", "id")
_CORRELATION_HEADERS = ("x-request-id", "request-id")

_NETWORK_EXCEPTIONS = (
    httpx.NetworkError,
    httpx.ProtocolError,
    httpx.ProxyError,
    ConnectionError,
    socket.gaierror,
)
_TIMEOUT_EXCEPTIONS = (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)
_DECODE_EXCEPTIONS = (httpx.DecodingError, json.JSONDecodeError)


class ErrorDetails(NamedTuple):
    """Fields extracted from a provider error body."""

    message: str
    code: Optional[str]
    payload: Any
    correlation_id: Optional[str]


def _status_of(obj: Any) -> Optional[int]:
    """Return a valid HTTP status from ``status_code`` / ``status``, if any."""
    for attr in ("status_code", "status"):
        val = getattr(obj, attr, None)
        if isinstance(val, int) and not isinstance(val, bool) and 100 <= val < 600:
            return val
    return None


def _header(headers: Any, name: str) -> Optional[str]:
    """Case-insensitive header lookup over ``httpx.Headers`` or a plain mapping."""
    if headers is None:
        return None
    items = getattr(headers, "items", None)
    if items is None:
        return None
    wanted = name.lower()
    for key, value in items():
        if isinstance(key, str) and key.lower() == wanted and isinstance(value, str):
            return value
    return None


def _body_text(response: Any) -> str:
    try:
        text = getattr(response, "text", "")
    except (httpx.StreamError, UnicodeDecodeError, LookupError):
        # Streaming responses that were never read have no text.
        return ""
    return text if isinstance(text, str) else ""


def _as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _as_code(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return _as_text(value)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a ``Retry-After`` header value into an absolute UTC timestamp.

    Accepts either a non-negative integer count of seconds (relative to
    ``now``) or an HTTP-date. HTTP-dates are only honoured when they lie
    strictly after ``now``. Anything else, including empty or negative
    values, yields ``None``.

    Parameters:
        value: Raw header value.
        now: Reference instant; defaults to :func:`utc_now`.

    Returns:
        The earliest safe retry time, or ``None`` when absent or unusable.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    now = now or utc_now()
    if _DIGITS.fullmatch(text):
        try:
            return now + timedelta(seconds=int(text))
        except OverflowError:
            return None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed if parsed > now else None


def extract_error_details(body: str, status: Optional[int] = None) -> ErrorDetails:
    """Pull message, code, payload and request id out of an error body.

    Lookup order for message and code: ``error.message`` / ``error.code``
    (or ``error`` itself when it is a string), then top-level ``message`` /
    ``code``, then the raw body text. An empty body becomes ``"HTTP <status>"``.
    Bodies that are not JSON are never an error; they are used verbatim.
    """
    fallback = body if body.strip() else f"HTTP {status if status is not None else 'error'}"
    message: Optional[str] = None
    code: Optional[str] = None
    correlation_id: Optional[str] = None
    payload: Any = body or None

    data: Any = None
    if body.strip():
        try:
            data = json.loads(body)
        except ValueError:
            data = None

    if data is not None:
        payload = data
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            message = _as_text(err.get("message"))
            code = _as_code(err.get("code"))
        elif _as_text(err):
            message = err
        if message is None:
            message = _as_text(data.get("message"))
        if code is None:
            code = _as_code(data.get("code"))
        for key in _CORRELATION_BODY_KEYS:
            correlation_id = _as_code(data.get(key))
            if correlation_id:
                break

    return ErrorDetails(message or fallback, code, payload, correlation_id)


def _classify_http(status: int, headers: Any, body: str, provider: Optional[str]) -> ProviderError:
    details = extract_error_details(body, status)
    correlation_id = details.correlation_id
    if correlation_id is None:
        for name in _CORRELATION_HEADERS:
            correlation_id = _header(headers, name)
            if correlation_id:
                break
    common = {
        "message": details.message,
        "provider": provider,
        "provider_payload": details.payload,
        "correlation_id": correlation_id,
    }
    if status == 429:
        return QuotaError(
            code=details.code or ErrorCode.RATE_LIMIT,
            retry_after=parse_retry_after(_header(headers, "retry-after")),
            **common,
        )
    if status in (401, 403):
        fallback = ErrorCode.UNAUTHORIZED if status == 401 else ErrorCode.FORBIDDEN
        return AuthError(code=details.code or fallback, **common)
    if status >= 500:
        return TransientError(code=details.code or ErrorCode.SERVER_ERROR, **common)
    return ClientError(code=details.code or ErrorCode.CLIENT_ERROR, **common)


def classify_response(response: Any, provider: Optional[str] = None) -> ProviderError:
    """Classify an HTTP response exposing ``status_code``, ``headers`` and ``text``."""
    status = _status_of(response)
    if status is None:
        return ClientError(
            message=f"Response without a usable status code: {response!r}",
            code=ErrorCode.UNKNOWN_ERROR,
            provider=provider,
        )
    return _classify_http(status, getattr(response, "headers", None), _body_text(response), provider)


def classify_exception(exc: BaseException, provider: Optional[str] = None) -> ProviderError:
    """Classify a raised exception.

    Exceptions carrying an HTTP response (``httpx.HTTPStatusError`` and SDK
    errors shaped like it) are classified by that response; exceptions that
    expose a status themselves are classified by status with ``str(exc)`` as
    the body.
    """
    if isinstance(exc, ProviderError):
        return exc
    response = getattr(exc, "response", None)
    if response is not None and _status_of(response) is not None:
        return classify_response(response, provider)
    status = _status_of(exc)
    if status is not None:
        return _classify_http(status, getattr(exc, "headers", None), _describe(exc), provider)

    if isinstance(exc, _TIMEOUT_EXCEPTIONS):
        return TransientError(
            message=f"Request timed out: {_describe(exc)}",
            code=ErrorCode.TIMEOUT,
            provider=provider,
            provider_payload=str(exc),
        )
    if isinstance(exc, _DECODE_EXCEPTIONS):
        return ClientError(
            message=f"Invalid response format: {_describe(exc)}",
            code=ErrorCode.PARSE_ERROR,
            provider=provider,
            provider_payload=str(exc),
        )
    if isinstance(exc, _NETWORK_EXCEPTIONS):
        return TransientError(
            message=f"Network error: {_describe(exc)}",
            code=ErrorCode.NETWORK_ERROR,
            provider=provider,
            provider_payload=str(exc),
        )
    lowered = str(exc).lower()
    if "timeout" in lowered or "timed out" in lowered:
        return TransientError(
            message=f"Request timed out: {_describe(exc)}",
            code=ErrorCode.TIMEOUT,
            provider=provider,
            provider_payload=str(exc),
        )
    if isinstance(exc, httpx.TransportError):
        return TransientError(
            message=f"HTTP error: {_describe(exc)}",
            code=ErrorCode.HTTP_ERROR,
            provider=provider,
            provider_payload=str(exc),
        )
    return ClientError(
        message=_describe(exc),
        code=ErrorCode.UNKNOWN_ERROR,
        provider=provider,
        provider_payload=str(exc),
    )


def classify(failure: Any, provider: Optional[str] = None) -> ProviderError:
    """Classify any failure (exception or HTTP response) into the taxonomy.

    Parameters:
        failure: A :class:`ProviderError` (returned unchanged), a raised
            exception, or an HTTP response object.
        provider: Provider id recorded on the produced error.

    Returns:
        Exactly one :class:`ProviderError` variant. Never raises.
    """
    if isinstance(failure, ProviderError):
        return failure
    try:
        if isinstance(failure, BaseException):
            return classify_exception(failure, provider)
        if _status_of(failure) is not None:
            return classify_response(failure, provider)
        description = str(failure) or repr(failure)
    except Exception as exc:  # classification is total; degrade instead of raising
        _logger.debug("classification of %r failed: %s", type(failure).__name__, exc)
        description = f"Unclassifiable failure of type {type(failure).__name__}"
    return ClientError(
        message=description or "Unknown failure",
        code=ErrorCode.UNKNOWN_ERROR,
        provider=provider,
        provider_payload=description,
    )


__all__ = [
    "ErrorDetails",
    "classify",
    "classify_exception",
    "classify_response",
    "extract_error_details",
    "parse_retry_after",
]
