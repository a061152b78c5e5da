"""Unit coverage for the provider error taxonomy value types."""

from __future__ import annotations

import pickle
from datetime import datetime, timezone

import pytest

from provider_resilience.base.errors import (
    AuthError,
    ClientError,
    ErrorCode,
    ProviderError,
    QuotaError,
    TransientError,
)


def test_base_type_is_abstract():
    with pytest.raises(TypeError):
        ProviderError(message="nope")


@pytest.mark.parametrize("message", ["", None, 42])
def test_message_must_be_non_empty_string(message):
    with pytest.raises(ValueError):
        ClientError(message=message)


def test_fields_are_read_only():
    err = TransientError(message="boom", code="X", provider="openai")
    with pytest.raises(AttributeError):
        err.message = "changed"
    with pytest.raises(AttributeError):
        err.provider = "anthropic"
    assert err.message == "boom"  # nosec B101 - asserts are appropriate in unit tests


def test_error_code_enum_is_stored_as_plain_string():
    err = AuthError(message="denied", code=ErrorCode.UNAUTHORIZED)
    assert err.code == "UNAUTHORIZED"  # nosec B101 - asserts are appropriate in unit tests
    assert type(err.code) is str  # nosec B101 - asserts are appropriate in unit tests


def test_str_includes_only_present_details():
    bare = ClientError(message="bad request")
    assert str(bare) == "ClientError: bad request"  # nosec B101 - asserts are appropriate in unit tests

    full = TransientError(message="down", code="SERVER_ERROR", provider="openai", correlation_id="req-1")
    assert (  # nosec B101 - asserts are appropriate in unit tests
        str(full) == "TransientError: down (code: SERVER_ERROR, provider: openai, correlation_id: req-1)"
    )


def test_quota_error_retry_after_in_str_and_dict():
    when = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    err = QuotaError(message="slow down", code="RATE_LIMIT", retry_after=when)
    assert str(err).endswith("(retry_after: 2030-01-01T12:00:00+00:00)")  # nosec B101 - asserts are appropriate in unit tests
    data = err.to_dict()
    assert data == {  # nosec B101 - asserts are appropriate in unit tests
        "type": "QuotaError",
        "message": "slow down",
        "code": "RATE_LIMIT",
        "retry_after": "2030-01-01T12:00:00+00:00",
    }


def test_quota_error_naive_retry_after_is_treated_as_utc():
    err = QuotaError(message="slow down", retry_after=datetime(2030, 1, 1, 12, 0))
    assert err.retry_after.tzinfo is timezone.utc  # nosec B101 - asserts are appropriate in unit tests


def test_to_dict_carries_payload_and_omits_unset():
    err = AuthError(message="denied", provider="xai", provider_payload={"error": "denied"})
    assert err.to_dict() == {  # nosec B101 - asserts are appropriate in unit tests
        "type": "AuthError",
        "message": "denied",
        "provider": "xai",
        "provider_payload": {"error": "denied"},
    }


def test_errors_chain_and_pickle():
    try:
        try:
            raise ConnectionError("reset")
        except ConnectionError as raw:
            raise TransientError(message="reset", code="NETWORK_ERROR", provider="cohere") from raw
    except TransientError as caught:
        assert isinstance(caught.__cause__, ConnectionError)  # nosec B101 - asserts are appropriate in unit tests
        assert caught.__traceback__ is not None  # nosec B101 - asserts are appropriate in unit tests
        restored = pickle.loads(pickle.dumps(caught))  # nosec B301 - round-trip of a value we just built
        expected = caught.to_dict()

    assert type(restored) is TransientError  # nosec B101 - asserts are appropriate in unit tests
    assert restored.to_dict() == expected  # nosec B101 - asserts are appropriate in unit tests
