"""Unified resilience configuration per provider.

Goals
-----
* Centralize defaults (request budgets, retry backoff, HTTP timeout).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) named by RESILIENCE_CONFIG_FILE
    3. Environment variables (e.g. OPENAI_RATE_LIMIT_MAX_REQUESTS)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_resilience_config(provider)``.

Environment Variable Conventions
--------------------------------
<PROVIDER>_RATE_LIMIT_MAX_REQUESTS, <PROVIDER>_RATE_LIMIT_WINDOW,
<PROVIDER>_RETRY_MAX_ATTEMPTS, <PROVIDER>_RETRY_INITIAL_DELAY,
<PROVIDER>_RETRY_MAX_DELAY, <PROVIDER>_RETRY_MULTIPLIER, <PROVIDER>_HTTP_TIMEOUT
e.g. ANTHROPIC_RETRY_MAX_ATTEMPTS=5.

External Config File
--------------------
The file is parsed with ``yaml.safe_load`` (JSON is a subset of YAML), one
section per provider id:

```
openai:
  rate_limit_max_requests: 120
  rate_limit_window: 60
anthropic:
  retry_max_attempts: 5
```

Public API
----------
* get_resilience_config(provider: str, overrides: dict | None = None) -> dict
* build_retry_policy(settings: Mapping) -> RetryPolicy
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import yaml

from .defaults import CONFIG_FILE_ENV_VAR
from .settings import ResilienceSettings

if TYPE_CHECKING:  # pragma: no cover
    from ..base.resilience.retry import RetryPolicy

ENV_FIELD_MAP = {
    "rate_limit_max_requests": "RATE_LIMIT_MAX_REQUESTS",
    "rate_limit_window": "RATE_LIMIT_WINDOW",
    "retry_max_attempts": "RETRY_MAX_ATTEMPTS",
    "retry_initial_delay": "RETRY_INITIAL_DELAY",
    "retry_max_delay": "RETRY_MAX_DELAY",
    "retry_multiplier": "RETRY_MULTIPLIER",
    "http_timeout": "HTTP_TIMEOUT",
}


def _load_external_config() -> Dict[str, Any]:
    path = os.getenv(CONFIG_FILE_ENV_VAR)
    if not path:
        return {}
    p = Path(path)
    if not p.is_file():
        return {}
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        # Local import; base.logging pulls in the base package.
        from ..base.logging import get_logger, log_event

        log_event(
            get_logger("provider_resilience.config"),
            "config.file_invalid",
            level=logging.WARNING,
            path=str(p),
            error=str(e),
        )
        return {}
    return data if isinstance(data, dict) else {}


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None and val.strip():
            out[field] = val.strip()
    return out


def get_resilience_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the validated, merged resilience settings for ``provider``.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored. The result is the
    :class:`ResilienceSettings` dump without unset optional keys, ready to pass
    to ``create_rate_limiter`` and :func:`build_retry_policy`.

    Raises ``pydantic.ValidationError`` when a merged value is invalid.
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return ResilienceSettings.model_validate(cfg).model_dump(exclude_none=True)


def build_retry_policy(settings: Mapping[str, Any]) -> "RetryPolicy":
    """Build a :class:`RetryPolicy` from a settings map.

    Missing keys fall back to the policy defaults.
    """
    # Local import to break the base.resilience -> config.defaults cycle.
    from ..base.resilience.retry import RetryPolicy

    validated = ResilienceSettings.model_validate(dict(settings))
    return RetryPolicy(
        max_attempts=validated.retry_max_attempts,
        initial_delay=validated.retry_initial_delay,
        max_delay=validated.retry_max_delay,
        multiplier=validated.retry_multiplier,
    )


__all__ = [
    "ENV_FIELD_MAP",
    "ResilienceSettings",
    "get_resilience_config",
    "build_retry_policy",
]
