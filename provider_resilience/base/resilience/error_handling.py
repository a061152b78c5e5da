"""Decorator that converts arbitrary failures into provider taxonomy errors."""
from __future__ import annotations

import functools
import inspect
from typing import Callable, Optional, TypeVar

from ..errors import ProviderError, classify

T = TypeVar("T")


def classify_errors(provider: Optional[str] = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Return a decorator that lets only taxonomy errors escape ``func``.

    Works for plain and ``async def`` functions. A ``ProviderError`` passes
    through untouched; any other ``Exception`` is classified and re-raised
    chained to the original.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except ProviderError:
                    raise
                except Exception as e:
                    raise classify(e, provider) from e

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ProviderError:
                raise
            except Exception as e:
                raise classify(e, provider) from e

        return wrapper

    return decorator


__all__ = ["classify_errors"]
