"""Invalid request failure type."""
from __future__ import annotations

from dataclasses import dataclass

from .provider_error import ProviderError


@dataclass(eq=False)
class ClientError(ProviderError):
    """The request was malformed or rejected as invalid. Never retryable.

    Also the conservative landing spot for failures the classifier does not
    recognise.
    """


__all__ = ["ClientError"]
