"""Small shared helpers for the base layer."""

from .clock import utc_now

__all__ = ["utc_now"]
