"""Transient failure type (network, timeout, 5xx)."""
from __future__ import annotations

from dataclasses import dataclass

from .provider_error import ProviderError


@dataclass(eq=False)
class TransientError(ProviderError):
    """A temporary failure that may succeed when retried."""


__all__ = ["TransientError"]
