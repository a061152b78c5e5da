"""Authentication/authorization failure type."""
from __future__ import annotations

from dataclasses import dataclass

from .provider_error import ProviderError


@dataclass(eq=False)
class AuthError(ProviderError):
    """Credentials were rejected or lack permission. Never retryable."""


__all__ = ["AuthError"]
