"""OpenCage geocoder implementation."""

from __future__ import annotations

import asyncio
import os

import httpx

from pdv_locator.exceptions import AuthenticationError
from pdv_locator.providers._http import HttpProviderMixin
from pdv_locator.providers.base import BaseGeocodeProvider
from pdv_locator.schema import Coordinates

OPENCAGE_URL = "https://api.opencagedata.com/geocode/v1/json"


class OpenCageProvider(HttpProviderMixin, BaseGeocodeProvider):
    """OpenCage forward geocoding, biased to Brazilian Portuguese results."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        url: str = OPENCAGE_URL,
        timeout_sec: float = 10.0,
        max_concurrency: int = 3,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the OpenCage provider.

        Args:
            api_key: OpenCage key. Falls back to OPENCAGE_KEY env var.
            url: Endpoint, overridable for self-hosted proxies.
            timeout_sec: Per-call timeout.
            max_concurrency: Upper bound on simultaneous outbound requests.
            client: Pre-built httpx client (tests inject a MockTransport one).
        """
        self.api_key = api_key or os.environ.get("OPENCAGE_KEY") or None
        self.url = url
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._init_client(client, timeout_sec)

    async def geocode(self, address: str) -> Coordinates | None:
        if not self.api_key:
            raise AuthenticationError(
                "No API key provided. Set OPENCAGE_KEY environment variable "
                "or pass api_key parameter."
            )

        params = {
            "q": address,
            "key": self.api_key,
            "limit": 1,
            "no_annotations": 1,
            "language": "pt-BR",
        }
        async with self._semaphore:
            _, payload = await self._get_json(self.url, params=params)

        return self._parse_payload(payload)

    @staticmethod
    def _parse_payload(payload: object) -> Coordinates | None:
        if not isinstance(payload, dict):
            return None
        results = payload.get("results") or []
        if not results or not isinstance(results[0], dict):
            return None
        first = results[0]
        geometry = first.get("geometry")
        if not isinstance(geometry, dict):
            return None
        return Coordinates.from_values(geometry.get("lat"), geometry.get("lng"), first.get("formatted"))
