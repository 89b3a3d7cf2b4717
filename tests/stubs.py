"""Test doubles for the geocoding providers."""

import asyncio

from pdv_locator.providers.base import BaseGeocodeProvider, BasePostalCodeProvider
from pdv_locator.schema import Coordinates


class StubGeocoder(BaseGeocodeProvider):
    """Answers from a fixed address table and counts calls."""

    def __init__(self, table=None, *, delay=0.0, error=None):
        self.table = dict(table or {})
        self.delay = delay
        self.error = error
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def geocode(self, address):
        self.calls.append(address)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            value = self.table.get(address)
            if value is None:
                return None
            return Coordinates(lat=value[0], lon=value[1])
        finally:
            self.active -= 1


class StubPostalLookup(BasePostalCodeProvider):
    def __init__(self, table=None, *, error=None):
        self.table = dict(table or {})
        self.error = error
        self.calls = []

    async def lookup(self, postal_code):
        self.calls.append(postal_code)
        if self.error is not None:
            raise self.error
        value = self.table.get(postal_code)
        return Coordinates(lat=value[0], lon=value[1]) if value else None
