"""Unsupported-capability failure type."""
from __future__ import annotations

from dataclasses import dataclass

from .provider_error import ProviderError


@dataclass(eq=False)
class CapabilityError(ProviderError):
    """The target provider or model does not support the requested operation."""


__all__ = ["CapabilityError"]
