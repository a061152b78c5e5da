"""Build the rate limiter for a provider binding from a settings map.

Resolution order
----------------
1. ``settings["rate_limiter"]`` holding a :class:`RateLimiter` is used as-is;
   the key present with value ``None`` disables limiting.
2. ``rate_limit_max_requests`` together with ``rate_limit_window`` (seconds or
   ``timedelta``) builds a dedicated limiter.
3. Otherwise the provider's default budget from
   :data:`DEFAULT_REQUESTS_PER_MINUTE` applies over a one-minute window.
   Providers without a default get no limiter.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping, Optional

from ...config.defaults import DEFAULT_RATE_LIMIT_WINDOW, DEFAULT_REQUESTS_PER_MINUTE
from .rate_limiter import RateLimiter

RATE_LIMITER_KEY = "rate_limiter"
MAX_REQUESTS_KEY = "rate_limit_max_requests"
WINDOW_KEY = "rate_limit_window"


def create_rate_limiter(provider_id: str, settings: Optional[Mapping[str, Any]] = None) -> Optional[RateLimiter]:
    """Return the limiter ``provider_id`` should use, or ``None`` for no limiting.

    Raises
    ------
    TypeError
        ``rate_limiter`` holds something other than a limiter, or
        ``rate_limit_window`` is neither a number nor a ``timedelta``.
    ValueError
        The explicit budget is not positive (raised by :class:`RateLimiter`).
    """
    settings = settings or {}

    if RATE_LIMITER_KEY in settings:
        candidate = settings[RATE_LIMITER_KEY]
        if candidate is None or isinstance(candidate, RateLimiter):
            return candidate
        raise TypeError(f"{RATE_LIMITER_KEY} must be a RateLimiter or None, got {type(candidate).__name__}")

    max_requests = settings.get(MAX_REQUESTS_KEY)
    window = settings.get(WINDOW_KEY)
    if max_requests is not None and window is not None:
        if isinstance(window, bool) or not isinstance(window, (int, float, timedelta)):
            raise TypeError(f"{WINDOW_KEY} must be seconds or a timedelta, got {type(window).__name__}")
        return RateLimiter(max_requests, window)

    default_rpm = DEFAULT_REQUESTS_PER_MINUTE.get((provider_id or "").lower())
    if default_rpm is None:
        return None
    return RateLimiter(default_rpm, DEFAULT_RATE_LIMIT_WINDOW)


__all__ = ["create_rate_limiter", "RATE_LIMITER_KEY", "MAX_REQUESTS_KEY", "WINDOW_KEY"]
