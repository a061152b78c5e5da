"""Validated resilience settings for one provider.

Purpose
-------
Give the merged configuration map a typed, validated shape before it reaches
the rate limiter factory or :func:`build_retry_policy`. Values coming from
environment variables arrive as strings; Pydantic's lax mode coerces them.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation and ``.model_dump()``.

Failure modes
-------------
- ``pydantic.ValidationError`` (a ``ValueError``) for out-of-range or
  unparsable values. Unknown keys are ignored.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, model_validator

from .defaults import (
    DEFAULT_RATE_LIMIT_WINDOW,
    HTTP_DEFAULT_TIMEOUT,
    RETRY_DEFAULT_INITIAL_DELAY,
    RETRY_DEFAULT_MAX_ATTEMPTS,
    RETRY_DEFAULT_MAX_DELAY,
    RETRY_DEFAULT_MULTIPLIER,
)


class ResilienceSettings(BaseModel):
    """Rate-limit, retry and HTTP timeout settings.

    Attributes
    ----------
    rate_limit_max_requests:
        Requests allowed per ``rate_limit_window``. ``None`` means "use the
        provider's default budget, if any".
    rate_limit_window:
        Window in seconds over which ``rate_limit_max_requests`` applies.
    retry_max_attempts, retry_initial_delay, retry_max_delay, retry_multiplier:
        Fields of the :class:`RetryPolicy` built from these settings.
    http_timeout:
        Per-request timeout in seconds for the HTTP binding.
    """

    model_config = ConfigDict(extra="ignore")

    rate_limit_max_requests: Optional[PositiveInt] = None
    rate_limit_window: PositiveFloat = DEFAULT_RATE_LIMIT_WINDOW
    retry_max_attempts: int = Field(default=RETRY_DEFAULT_MAX_ATTEMPTS, ge=1)
    retry_initial_delay: float = Field(default=RETRY_DEFAULT_INITIAL_DELAY, ge=0)
    retry_max_delay: float = Field(default=RETRY_DEFAULT_MAX_DELAY, ge=0)
    retry_multiplier: PositiveFloat = RETRY_DEFAULT_MULTIPLIER
    http_timeout: PositiveFloat = HTTP_DEFAULT_TIMEOUT

    @model_validator(mode="after")
    def _check_delay_range(self) -> "ResilienceSettings":
        if self.retry_max_delay < self.retry_initial_delay:
            raise ValueError("retry_max_delay must be >= retry_initial_delay")
        return self


__all__ = ["ResilienceSettings"]
