from __future__ import annotations

from datetime import timedelta

import pytest

from provider_resilience.base.resilience.rate_limiter import RateLimiter
from provider_resilience.base.resilience.rate_limiter_factory import create_rate_limiter


def test_explicit_instance_is_used_as_is():
    limiter = RateLimiter(3, 1.0)
    assert create_rate_limiter("openai", {"rate_limiter": limiter}) is limiter  # nosec B101


def test_explicit_none_disables_limiting():
    assert create_rate_limiter("openai", {"rate_limiter": None}) is None  # nosec B101


def test_explicit_value_of_wrong_type_rejected():
    with pytest.raises(TypeError):
        create_rate_limiter("openai", {"rate_limiter": "fast"})


@pytest.mark.parametrize("window, seconds", [(30, 30.0), (2.5, 2.5), (timedelta(minutes=2), 120.0)])
def test_explicit_budget_builds_dedicated_limiter(window, seconds):
    limiter = create_rate_limiter("acme", {"rate_limit_max_requests": 7, "rate_limit_window": window})
    assert limiter.capacity == 7  # nosec B101 - asserts are appropriate in unit tests
    assert limiter.window == seconds  # nosec B101 - asserts are appropriate in unit tests


def test_explicit_budget_with_bad_window_type():
    with pytest.raises(TypeError):
        create_rate_limiter("openai", {"rate_limit_max_requests": 7, "rate_limit_window": "1m"})


def test_explicit_budget_with_invalid_values():
    with pytest.raises(ValueError):
        create_rate_limiter("openai", {"rate_limit_max_requests": 0, "rate_limit_window": 60})


@pytest.mark.parametrize(
    "provider, rpm",
    [("openai", 60), ("anthropic", 50), ("google", 60), ("cohere", 100), ("xai", 60), ("OpenAI", 60)],
)
def test_default_table(provider, rpm):
    limiter = create_rate_limiter(provider, {})
    assert limiter.capacity == rpm  # nosec B101 - asserts are appropriate in unit tests
    assert limiter.window == 60.0  # nosec B101 - asserts are appropriate in unit tests


def test_partial_budget_falls_back_to_default():
    limiter = create_rate_limiter("anthropic", {"rate_limit_window": 10})
    assert limiter.capacity == 50  # nosec B101 - asserts are appropriate in unit tests


def test_unknown_provider_without_budget_gets_no_limiter():
    assert create_rate_limiter("acme", {}) is None  # nosec B101
    assert create_rate_limiter("acme") is None  # nosec B101
