"""Data models for pdv-locator."""

from __future__ import annotations

import math
from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class Coordinates:
    """A resolved latitude/longitude pair."""

    lat: float
    lon: float
    formatted: str | None = None

    @classmethod
    def from_values(cls, lat, lon, formatted: str | None = None) -> Coordinates | None:
        """Build coordinates from loosely typed values, or None if not finite."""
        try:
            lat_value = float(lat)
            lon_value = float(lon)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
            return None
        return cls(lat=lat_value, lon=lon_value, formatted=formatted or None)

    def to_dict(self) -> dict:
        data: dict = {"lat": self.lat, "lon": self.lon}
        if self.formatted:
            data["formatted"] = self.formatted
        return data


class Product(BaseModel):
    """A product that can be searched for."""

    id: str
    name: str = ""
    size: str = ""
    highlighted: bool = False
    image_url: str = ""


class Store(BaseModel):
    """A point of sale (PDV)."""

    id: str
    name: str = ""
    street: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None

    @property
    def coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates.from_values(self.latitude, self.longitude)

    def locate(self, coordinates: Coordinates) -> None:
        """Record resolved coordinates on the store."""
        self.latitude = coordinates.lat
        self.longitude = coordinates.lon


class ProductStoreLink(BaseModel):
    """One row of the product/store association table."""

    product_id: str
    store_id: str


class NearbyStore(BaseModel):
    """A store together with its distance from the user."""

    store: Store
    distance_km: float | None = None

    def to_payload(self) -> dict:
        return {
            "id": self.store.id,
            "name": self.store.name,
            "postalCode": self.store.postal_code,
            "address": self.store.address,
            "latitude": self.store.latitude,
            "longitude": self.store.longitude,
            "distanceKm": self.distance_km,
        }
