"""
Quota / rate-limit failure type.

Carries an optional absolute ``retry_after`` timestamp parsed from the
provider's ``Retry-After`` header. The retry handler waits at least until
that instant before the next attempt when it lies in the future.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .provider_error import ProviderError


@dataclass(eq=False)
class QuotaError(ProviderError):
    """The caller exceeded a provider-imposed request budget. Retryable.

    Attributes:
        retry_after: Earliest safe retry time (timezone-aware, UTC). Naive
            datetimes are interpreted as UTC.
    """

    retry_after: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.retry_after is not None and self.retry_after.tzinfo is None:
            self.retry_after = self.retry_after.replace(tzinfo=timezone.utc)
        super().__post_init__()

    def __str__(self) -> str:
        base = super().__str__()
        if self.retry_after is not None:
            return f"{base} (retry_after: {self.retry_after.isoformat()})"
        return base

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.retry_after is not None:
            data["retry_after"] = self.retry_after.isoformat()
        return data


__all__ = ["QuotaError"]
