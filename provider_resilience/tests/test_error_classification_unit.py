from __future__ import annotations

import json
import socket
import types
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import httpx
import pytest

from provider_resilience.base.errors import (
    AuthError,
    ClientError,
    QuotaError,
    TransientError,
    classify,
    extract_error_details,
    parse_retry_after,
)


def _response(status: int, body: str = "", headers: dict | None = None) -> httpx.Response:
    request = httpx.Request("POST", "https://api.example.com/v1/chat")
    return httpx.Response(status, text=body, headers=headers or {}, request=request)


def test_provider_error_passthrough_is_identity():
    err = AuthError(message="denied", provider="openai")
    assert classify(err, "anthropic") is err  # nosec B101 - assert is appropriate in unit tests


def test_429_with_retry_after_seconds():
    before = datetime.now(timezone.utc)
    err = classify(_response(429, "", {"Retry-After": "30"}), "openai")
    after = datetime.now(timezone.utc)

    assert isinstance(err, QuotaError)  # nosec B101 - assert is appropriate in unit tests
    assert err.code == "RATE_LIMIT"  # nosec B101 - assert is appropriate in unit tests
    assert err.provider == "openai"  # nosec B101 - assert is appropriate in unit tests
    assert before + timedelta(seconds=30) <= err.retry_after <= after + timedelta(seconds=30)  # nosec B101


def test_429_header_lookup_is_case_insensitive_and_code_from_body():
    body = json.dumps({"error": {"message": "quota exhausted", "code": "insufficient_quota"}})
    err = classify(_response(429, body, {"retry-after": "5"}))
    assert isinstance(err, QuotaError)  # nosec B101 - assert is appropriate in unit tests
    assert err.code == "insufficient_quota"  # nosec B101 - assert is appropriate in unit tests
    assert err.message == "quota exhausted"  # nosec B101 - assert is appropriate in unit tests
    assert err.retry_after is not None  # nosec B101 - assert is appropriate in unit tests


def test_429_without_usable_retry_after():
    err = classify(_response(429, "", {"Retry-After": "soon"}))
    assert isinstance(err, QuotaError)  # nosec B101 - assert is appropriate in unit tests
    assert err.retry_after is None  # nosec B101 - assert is appropriate in unit tests


@pytest.mark.parametrize("status, code", [(401, "UNAUTHORIZED"), (403, "FORBIDDEN")])
def test_auth_statuses(status, code):
    err = classify(_response(status))
    assert isinstance(err, AuthError)  # nosec B101 - assert is appropriate in unit tests
    assert err.code == code  # nosec B101 - assert is appropriate in unit tests
    assert err.message == f"HTTP {status}"  # nosec B101 - assert is appropriate in unit tests


def test_5xx_is_transient():
    err = classify(_response(503, "Service Unavailable"), "google")
    assert isinstance(err, TransientError)  # nosec B101 - assert is appropriate in unit tests
    assert err.code == "SERVER_ERROR"  # nosec B101 - assert is appropriate in unit tests
    assert err.message == "Service Unavailable"  # nosec B101 - assert is appropriate in unit tests
    assert err.provider_payload == "Service Unavailable"  # nosec B101 - assert is appropriate in unit tests


def test_other_status_is_client_error_with_structured_body():
    body = json.dumps({"error": {"message": "model not found", "code": 404}, "request_id": "req_123"})
    err = classify(_response(404, body))
    assert isinstance(err, ClientError)  # nosec B101 - assert is appropriate in unit tests
    assert err.message == "model not found"  # nosec B101 - assert is appropriate in unit tests
    assert err.code == "404"  # nosec B101 - assert is appropriate in unit tests
    assert err.correlation_id == "req_123"  # nosec B101 - assert is appropriate in unit tests
    assert err.provider_payload["request_id"] == "req_123"  # nosec B101 - assert is appropriate in unit tests


def test_correlation_id_falls_back_to_header():
    err = classify(_response(400, '{"message": "bad"}', {"X-Request-Id": "hdr-9"}))
    assert err.message == "bad"  # nosec B101 - assert is appropriate in unit tests
    assert err.code == "CLIENT_ERROR"  # nosec B101 - assert is appropriate in unit tests
    assert err.correlation_id == "hdr-9"  # nosec B101 - assert is appropriate in unit tests


def test_http_status_error_classified_by_its_response():
    response = _response(502, "bad gateway")
    exc = httpx.HTTPStatusError("upstream", request=response.request, response=response)
    err = classify(exc, "cohere")
    assert isinstance(err, TransientError)  # nosec B101 - assert is appropriate in unit tests
    assert err.provider == "cohere"  # nosec B101 - assert is appropriate in unit tests


def test_response_like_objects_are_accepted():
    fake = types.SimpleNamespace(status_code=500, headers={}, text="")
    err = classify(fake)
    assert isinstance(err, TransientError)  # nosec B101 - assert is appropriate in unit tests
    assert err.message == "HTTP 500"  # nosec B101 - assert is appropriate in unit tests


@pytest.mark.parametrize(
    "exc, kind, code",
    [
        (httpx.ConnectError("connection refused"), TransientError, "NETWORK_ERROR"),
        (httpx.RemoteProtocolError("peer closed"), TransientError, "NETWORK_ERROR"),
        (ConnectionResetError("reset by peer"), TransientError, "NETWORK_ERROR"),
        (socket.gaierror("name resolution failed"), TransientError, "NETWORK_ERROR"),
        (httpx.ReadTimeout("read timeout"), TransientError, "TIMEOUT"),
        (TimeoutError(), TransientError, "TIMEOUT"),
        (RuntimeError("operation timed out"), TransientError, "TIMEOUT"),
        (httpx.UnsupportedProtocol("ftp not supported"), TransientError, "HTTP_ERROR"),
        (httpx.DecodingError("bad gzip"), ClientError, "PARSE_ERROR"),
        (json.JSONDecodeError("Expecting value", "<html>", 0), ClientError, "PARSE_ERROR"),
        (RuntimeError("boom"), ClientError, "UNKNOWN_ERROR"),
    ],
)
def test_exception_mapping(exc, kind, code):
    err = classify(exc, "xai")
    assert type(err) is kind  # nosec B101 - assert is appropriate in unit tests
    assert err.code == code  # nosec B101 - assert is appropriate in unit tests
    assert err.provider == "xai"  # nosec B101 - assert is appropriate in unit tests
    assert err.message  # nosec B101 - assert is appropriate in unit tests


def test_unrecognised_values_degrade_to_client_error():
    err = classify(object())
    assert isinstance(err, ClientError)  # nosec B101 - assert is appropriate in unit tests
    assert err.code == "UNKNOWN_ERROR"  # nosec B101 - assert is appropriate in unit tests


def test_extract_error_details_variants():
    assert extract_error_details('{"error": "plain string"}', 400).message == "plain string"  # nosec B101
    assert extract_error_details("not json at all", 400).message == "not json at all"  # nosec B101
    assert extract_error_details("   ", 418).message == "HTTP 418"  # nosec B101
    details = extract_error_details('{"message": "m", "code": "c", "requestId": "r"}')
    assert (details.message, details.code, details.correlation_id) == ("m", "c", "r")  # nosec B101


def test_parse_retry_after():
    now = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_retry_after("30", now) == now + timedelta(seconds=30)  # nosec B101
    assert parse_retry_after("0", now) == now  # nosec B101

    future = now + timedelta(minutes=2)
    assert parse_retry_after(format_datetime(future, usegmt=True), now) == future  # nosec B101
    past = now - timedelta(minutes=2)
    assert parse_retry_after(format_datetime(past, usegmt=True), now) is None  # nosec B101

    for junk in (None, "", "-5", "1.5", "later"):
        assert parse_retry_after(junk, now) is None  # nosec B101
