"""Nearest point-of-sale resolution."""

from __future__ import annotations

import asyncio
import logging
import math
import re
from collections.abc import Iterable

from pdv_locator.address import POSTAL_CODE_DIGITS, build_address, only_digits
from pdv_locator.cache import GeocodeCache
from pdv_locator.dataset import Catalog
from pdv_locator.distance import haversine_km
from pdv_locator.exceptions import GeocoderError, InvalidInputError, PostalCodeNotFoundError
from pdv_locator.providers.base import BasePostalCodeProvider
from pdv_locator.schema import Coordinates, NearbyStore, Store

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 20

_FIVE_DIGITS = re.compile(r"^[0-9]{5}$")


def candidate_product_ids(product_id: str) -> list[str]:
    """Return the product id plus its 9xxxx/0xxxx sibling for 5-digit ids.

    The two upstream id schemes disagree on the leading digit of 5-digit
    codes, so both spellings are searched.
    """
    candidates = [product_id]
    if _FIVE_DIGITS.match(product_id):
        if product_id.startswith("9"):
            candidates.append("0" + product_id[1:])
        elif product_id.startswith("0"):
            candidates.append("9" + product_id[1:])
    return candidates


def parse_coordinate(value: object, name: str, limit: float) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidInputError(f"{name} is required")
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            raise InvalidInputError(f"{name} is required")
    else:
        text = value
    try:
        number = float(text)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be numeric") from exc
    if not math.isfinite(number) or abs(number) > limit:
        raise InvalidInputError(f"{name} out of range")
    return number


def parse_user_location(lat: object, lon: object) -> Coordinates:
    return Coordinates(
        lat=parse_coordinate(lat, "lat", 90.0),
        lon=parse_coordinate(lon, "lon", 180.0),
    )


def rank(results: list[NearbyStore], limit: int) -> list[NearbyStore]:
    """Stable ascending sort by distance with unknown distances last, then truncate."""
    ordered = sorted(
        results,
        key=lambda item: (item.distance_km is None, item.distance_km if item.distance_km is not None else 0.0),
    )
    return ordered[:limit]


class StoreResolver:
    """Finds the stores closest to a user, geocoding store addresses on demand."""

    def __init__(
        self,
        catalog: Catalog,
        cache: GeocodeCache,
        postal_provider: BasePostalCodeProvider | None = None,
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self.catalog = catalog
        self.cache = cache
        self.postal_provider = postal_provider
        self.max_results = max_results

    def stores_for_product(self, product_id: str) -> list[Store]:
        """Distinct stores linked to the product (or its id sibling), in link order."""
        candidates = set(candidate_product_ids(product_id))
        matched: dict[str, Store] = {}
        for link in self.catalog.links:
            if link.product_id not in candidates or link.store_id in matched:
                continue
            store = self.catalog.stores.get(link.store_id)
            if store is not None:
                matched[link.store_id] = store
        return list(matched.values())

    async def find_stores_for_product(self, product_id: object, user_lat: object, user_lon: object) -> list[NearbyStore]:
        product_id = str(product_id if product_id is not None else "").strip()
        if not product_id:
            raise InvalidInputError("productId is required")
        origin = parse_user_location(user_lat, user_lon)

        stores = self.stores_for_product(product_id)
        logger.debug("product %s: %d candidate stores", product_id, len(stores))
        return await self._rank_from(origin, stores)

    async def find_stores_near_coordinates(self, user_lat: object, user_lon: object) -> list[NearbyStore]:
        origin = parse_user_location(user_lat, user_lon)
        return await self._rank_from(origin, self.catalog.stores.values())

    async def find_stores_near_postal_code(self, postal_code: object) -> list[NearbyStore]:
        cep = only_digits(postal_code)
        if len(cep) != POSTAL_CODE_DIGITS:
            raise InvalidInputError("CEP must have 8 digits")
        if self.postal_provider is None:
            raise PostalCodeNotFoundError("postal code lookup is not configured")

        try:
            origin = await self.postal_provider.lookup(cep)
        except GeocoderError as exc:
            logger.warning("postal lookup failed for %s: %s", cep, exc)
            raise PostalCodeNotFoundError(f"CEP {cep} could not be resolved") from exc
        if origin is None:
            raise PostalCodeNotFoundError(f"CEP {cep} not found")

        return await self._rank_from(origin, self.catalog.stores.values())

    async def locate(self, store: Store) -> Coordinates | None:
        """Coordinates for the store, geocoding its address when they are missing."""
        coordinates = store.coordinates
        if coordinates is not None:
            return coordinates

        coordinates = await self.cache.resolve(build_address(store))
        if coordinates is not None:
            store.locate(coordinates)
        return coordinates

    async def _rank_from(self, origin: Coordinates, stores: Iterable[Store]) -> list[NearbyStore]:
        stores = list(stores)
        located = await asyncio.gather(*(self.locate(store) for store in stores))

        results = [
            NearbyStore(store=store, distance_km=haversine_km(origin.lat, origin.lon, coordinates.lat, coordinates.lon))
            for store, coordinates in zip(stores, located)
            if coordinates is not None
        ]
        dropped = len(stores) - len(results)
        if dropped:
            logger.info("%d stores left out: address could not be geocoded", dropped)
        return rank(results, self.max_results)
