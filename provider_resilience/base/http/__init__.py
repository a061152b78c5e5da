"""HTTP utilities package for providers.

Exposes the rate-limited, retrying async client binding.
"""

from .client import ResilientHttpClient

__all__ = ["ResilientHttpClient"]
