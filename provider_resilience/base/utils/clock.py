"""Wall-clock helper.

Absolute timestamps (``Retry-After`` hints) are compared against this clock;
relative timing inside the rate limiter uses ``time.monotonic`` instead.
"""
from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


__all__ = ["utc_now"]
