"""Rate-limited, retrying async HTTP binding for one provider.

Purpose:
    Tie the resilience pieces together at the point where a provider call is
    actually made. One :class:`ResilientHttpClient` owns one rate limiter and
    one retry handler; every request attempt acquires the limiter, sends the
    request through ``httpx.AsyncClient`` and converts failures into the
    provider error taxonomy before the retry policy sees them.

External dependencies:
    - ``httpx`` for the underlying asynchronous HTTP client.

Timeout strategy:
    - When the binding creates its own client, the total timeout comes from
      the ``http_timeout`` setting (see :mod:`provider_resilience.config`).
      A caller-supplied client keeps whatever timeout it was built with.

Lifecycle & cleanup:
    - A client created here is closed by :meth:`ResilientHttpClient.aclose`
      or on leaving ``async with``. A client supplied by the caller is never
      closed by the binding.

Failure modes:
    - Transport errors (``httpx.HTTPError``) and responses with status >= 400
      surface as :class:`ProviderError` variants after retries are exhausted
      or refused. Successful responses are returned unchanged.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from ...config import build_retry_policy, get_resilience_config
from ...config.defaults import HTTP_DEFAULT_TIMEOUT
from ..errors import classify
from ..resilience.rate_limiter import RateLimiter
from ..resilience.rate_limiter_factory import create_rate_limiter
from ..resilience.retry import RetryPolicy
from ..resilience.retry_handler import RetryHandler

_FROM_SETTINGS: Any = object()


class ResilientHttpClient:
    """Provider binding owning one limiter and one retry handler.

    Parameters:
        provider: Provider id used for default budgets and stamped on errors.
        base_url: Base URL for relative request paths (own client only).
        headers: Static headers for every request (own client only).
        client: Existing ``httpx.AsyncClient`` to send through; not closed here.
        rate_limiter: Limiter to use. Defaults to the one resolved from
            ``settings``; pass ``None`` to disable limiting.
        retry_policy: Retry policy. Defaults to one built from ``settings``.
        settings: Resilience settings map. Defaults to
            ``get_resilience_config(provider)``.
    """

    def __init__(
        self,
        provider: str,
        *,
        base_url: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[RateLimiter] = _FROM_SETTINGS,
        retry_policy: Optional[RetryPolicy] = None,
        settings: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.provider = provider
        resolved = dict(settings) if settings is not None else get_resilience_config(provider)

        if rate_limiter is _FROM_SETTINGS:
            rate_limiter = create_rate_limiter(provider, resolved)
        self.rate_limiter = rate_limiter
        self.retry_policy = retry_policy or build_retry_policy(resolved)
        self._handler = RetryHandler(self.retry_policy, provider=provider)

        self._owns_client = client is None
        if client is None:
            timeout = resolved.get("http_timeout", HTTP_DEFAULT_TIMEOUT)
            client = httpx.AsyncClient(base_url=base_url or "", headers=headers, timeout=timeout)
        self._client = client

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send ``method url`` with rate limiting and retries.

        Keyword arguments are forwarded to ``httpx.AsyncClient.request`` and
        replayed unchanged on every attempt.
        """

        async def attempt() -> httpx.Response:
            if self.rate_limiter is not None:
                await self.rate_limiter.acquire()
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                raise classify(e, self.provider) from e
            if response.status_code >= 400:
                raise classify(response, self.provider)
            return response

        attempt.__name__ = f"{method.upper()} {url}"
        return await self._handler.execute(attempt)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        """Close the underlying client if this binding created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ResilientHttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


__all__ = ["ResilientHttpClient"]
