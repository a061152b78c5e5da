"""provider_resilience.config.defaults
=================================

Central place for the small, stable default values used by the resilience
layer. They can be overridden through an external config file, environment
variables or explicit overrides (see :mod:`provider_resilience.config`).

Module Purpose
--------------
- Provide a single import location for default constants (no I/O).
- Keep limiter and retry code free of magic literals.

This module imports nothing from the rest of the package so that any layer
can depend on it without creating import cycles.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# ---- Rate limiting ----

# Requests allowed per window for the providers that ship with a default
# budget. Keys are lowercase provider ids; read-only.
DEFAULT_REQUESTS_PER_MINUTE: Mapping[str, int] = MappingProxyType(
    {
        "openai": 60,
        "anthropic": 50,
        "google": 60,
        "cohere": 100,
        "xai": 60,
    }
)

# Window the default budgets above are expressed over, in seconds.
DEFAULT_RATE_LIMIT_WINDOW = 60.0

# ---- Retry ----

RETRY_DEFAULT_MAX_ATTEMPTS = 3
RETRY_DEFAULT_INITIAL_DELAY = 0.1
RETRY_DEFAULT_MAX_DELAY = 30.0
RETRY_DEFAULT_MULTIPLIER = 2.0

# ---- HTTP ----

# Total per-request timeout applied by ResilientHttpClient, in seconds.
HTTP_DEFAULT_TIMEOUT = 30.0

# Env var naming an external JSON/YAML config file.
CONFIG_FILE_ENV_VAR = "RESILIENCE_CONFIG_FILE"

__all__ = [
    "DEFAULT_REQUESTS_PER_MINUTE",
    "DEFAULT_RATE_LIMIT_WINDOW",
    "RETRY_DEFAULT_MAX_ATTEMPTS",
    "RETRY_DEFAULT_INITIAL_DELAY",
    "RETRY_DEFAULT_MAX_DELAY",
    "RETRY_DEFAULT_MULTIPLIER",
    "HTTP_DEFAULT_TIMEOUT",
    "CONFIG_FILE_ENV_VAR",
]
