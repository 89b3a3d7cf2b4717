"""Shared httpx plumbing for provider adapters."""

from __future__ import annotations

import httpx

from pdv_locator.exceptions import AuthenticationError, ProviderUnavailableError, RateLimitError


class HttpProviderMixin:
    """Owns a lazily created AsyncClient unless one is injected."""

    timeout_sec: float = 10.0
    _client: httpx.AsyncClient | None = None
    _owns_client: bool = True

    def _init_client(self, client: httpx.AsyncClient | None, timeout_sec: float) -> None:
        self.timeout_sec = timeout_sec
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_sec)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, url: str, params: dict | None = None) -> tuple[int, object]:
        try:
            response = await self.client.get(url, params=params, timeout=self.timeout_sec)
        except httpx.TimeoutException as exc:
            raise ProviderUnavailableError(f"request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(f"request failed: {exc}") from exc

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(f"provider rejected credentials (HTTP {status})")
        if status in (402, 429):
            raise RateLimitError(f"provider rate limit or quota exceeded (HTTP {status})")
        if status == 404:
            return status, None
        if status >= 400:
            raise ProviderUnavailableError(f"provider answered HTTP {status}")

        try:
            return status, response.json()
        except ValueError as exc:
            raise ProviderUnavailableError(f"invalid JSON from provider: {exc}") from exc
