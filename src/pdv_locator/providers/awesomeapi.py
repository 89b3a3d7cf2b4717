"""AwesomeAPI CEP lookup implementation."""

from __future__ import annotations

import httpx

from pdv_locator.providers._http import HttpProviderMixin
from pdv_locator.providers.base import BasePostalCodeProvider
from pdv_locator.schema import Coordinates

CEP_LOOKUP_URL = "https://cep.awesomeapi.com.br/json"


class AwesomeApiCepProvider(HttpProviderMixin, BasePostalCodeProvider):
    """Postal code to coordinates through cep.awesomeapi.com.br."""

    def __init__(
        self,
        *,
        url: str = CEP_LOOKUP_URL,
        timeout_sec: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url.rstrip("/")
        self._init_client(client, timeout_sec)

    async def lookup(self, postal_code: str) -> Coordinates | None:
        _, payload = await self._get_json(f"{self.url}/{postal_code}")
        if not isinstance(payload, dict):
            return None
        # Unknown CEPs come back as {"status": 404, "code": "not_found"} on some deployments.
        if not payload.get("lat") or not payload.get("lng"):
            return None
        return Coordinates.from_values(payload.get("lat"), payload.get("lng"), payload.get("address"))
