"""Pytest configuration for the resilience test suite.

Keeps every test independent of the developer's shell: resilience-related
environment variables are cleared before each test, and a controllable
monotonic clock is offered for rate limiter refill arithmetic.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from provider_resilience.config import ENV_FIELD_MAP
from provider_resilience.config.defaults import CONFIG_FILE_ENV_VAR, DEFAULT_REQUESTS_PER_MINUTE
from provider_resilience.base.logging import LEVEL_ENV_VAR

_PROVIDERS_UNDER_TEST = tuple(DEFAULT_REQUESTS_PER_MINUTE) + ("acme",)


class FakeClock:
    """Monotonic clock advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_resilience_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove config file, log level and per-provider overrides from the environment."""

    monkeypatch.delenv(CONFIG_FILE_ENV_VAR, raising=False)
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    for provider in _PROVIDERS_UNDER_TEST:
        for suffix in ENV_FIELD_MAP.values():
            monkeypatch.delenv(f"{provider.upper()}_{suffix}", raising=False)
    yield


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()
