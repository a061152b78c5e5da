"""
Structured provider error base type.

Every failure that leaves the resilience layer is an instance of one of the
concrete subclasses of :class:`ProviderError`. The base carries the shape
shared by all variants; the variant itself encodes the failure kind, which is
what retry decisions are keyed on.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ProviderError(Exception):
    """Abstract base for classified provider failures.

    Attributes:
        message: Human-readable description; must be non-empty.
        code: Provider-supplied or generic (:class:`ErrorCode`) error code.
        provider: Provider id the failure originated from (e.g. ``"openai"``).
        provider_payload: Raw provider error payload, kept opaque.
        correlation_id: Request id reported by the provider, when known.

    Instances are immutable once constructed: re-binding any of the fields
    above raises :class:`AttributeError`.
    """

    message: str
    code: Optional[str] = None
    provider: Optional[str] = None
    provider_payload: Any = None
    correlation_id: Optional[str] = None

    def __new__(cls, *args: Any, **kwargs: Any) -> "ProviderError":
        if cls is ProviderError:
            raise TypeError("ProviderError is abstract; raise one of its variants")
        return super().__new__(cls, *args, **kwargs)

    def __post_init__(self) -> None:
        if not isinstance(self.message, str) or not self.message:
            raise ValueError("message must be a non-empty string")
        if isinstance(self.code, ErrorCode):
            self.code = self.code.value
        Exception.__init__(self, self.message)
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.__dataclass_fields__ and self.__dict__.get("_sealed", False):
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        object.__setattr__(self, name, value)

    def __reduce__(self):
        return (type(self), tuple(getattr(self, f.name) for f in fields(self)))

    def _details(self) -> list[str]:
        parts = []
        if self.code is not None:
            parts.append(f"code: {self.code}")
        if self.provider is not None:
            parts.append(f"provider: {self.provider}")
        if self.correlation_id is not None:
            parts.append(f"correlation_id: {self.correlation_id}")
        return parts

    def __str__(self) -> str:
        details = self._details()
        suffix = f" ({', '.join(details)})" if details else ""
        return f"{type(self).__name__}: {self.message}{suffix}"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly mapping, omitting unset optional fields."""
        data: Dict[str, Any] = {"type": type(self).__name__, "message": self.message}
        if self.code is not None:
            data["code"] = self.code
        if self.provider is not None:
            data["provider"] = self.provider
        if self.correlation_id is not None:
            data["correlation_id"] = self.correlation_id
        if self.provider_payload is not None:
            data["provider_payload"] = self.provider_payload
        return data


__all__ = ["ProviderError"]
