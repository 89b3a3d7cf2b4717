"""Tests for the cache warming pass."""

import asyncio

from pdv_locator.address import build_address
from pdv_locator.cache import GeocodeCache
from pdv_locator.dataset import Catalog
from pdv_locator.schema import Coordinates, Store
from pdv_locator.warmup import store_addresses, warm_cache

from stubs import StubGeocoder


def test_warm_cache_dedupes_and_skips_cached(tmp_path):
    """Warming should skip duplicates and cached addresses."""
    provider = StubGeocoder({"a": (1.0, 1.0), "b": (2.0, 2.0)})
    cache = GeocodeCache(tmp_path / "cache.json", provider)
    asyncio.run(cache.resolve("a"))
    provider.calls.clear()

    report = asyncio.run(warm_cache(cache, ["a", "b", "b", " ", "c", "b "], concurrency=2, pause_sec=0))

    assert sorted(provider.calls) == ["b", "c"]
    assert report.total == 3
    assert report.already_cached == 1
    assert report.resolved == 1
    assert report.failed == 1
    assert cache.get("b") == Coordinates(lat=2.0, lon=2.0)


def test_warm_cache_never_exceeds_worker_count(tmp_path):
    """Warming should not run more lookups than workers."""
    addresses = [f"Rua {i}" for i in range(10)]
    provider = StubGeocoder({address: (0.0, 0.0) for address in addresses}, delay=0.01)
    cache = GeocodeCache(tmp_path / "cache.json", provider)

    report = asyncio.run(warm_cache(cache, addresses, concurrency=3, pause_sec=0))

    assert provider.max_active == 3
    assert report.resolved == 10
    assert len(cache) == 10


def test_warm_cache_persists_for_next_process(tmp_path):
    """Warmed entries should be on disk for the next process."""
    path = tmp_path / "cache.json"
    asyncio.run(warm_cache(GeocodeCache(path, StubGeocoder({"a": (1.0, 2.0)})), ["a"], pause_sec=0))

    assert GeocodeCache(path, StubGeocoder()).get("a") == Coordinates(lat=1.0, lon=2.0)


def test_store_addresses_skip_stores_with_coordinates():
    """Only stores without coordinates should be warmed."""
    located = Store(id="1", street="Rua A", city="Joinville", latitude=-26.3, longitude=-48.8)
    missing = Store(id="2", street="Rua B", city="Joinville", state="SC")
    catalog = Catalog.from_records(stores=[located, missing])

    assert list(store_addresses(catalog)) == [build_address(missing)]
