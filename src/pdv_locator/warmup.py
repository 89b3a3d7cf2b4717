"""One-off cache warming pass over every store address."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pdv_locator.address import build_address
from pdv_locator.cache import GeocodeCache
from pdv_locator.dataset import Catalog

logger = logging.getLogger(__name__)


@dataclass
class WarmupReport:
    total: int = 0
    already_cached: int = 0
    resolved: int = 0
    failed: int = 0


def store_addresses(catalog: Catalog) -> Iterator[str]:
    """Addresses of the stores that have no coordinates in the dataset."""
    for store in catalog.stores.values():
        if store.coordinates is None:
            yield build_address(store)


async def warm_cache(
    cache: GeocodeCache,
    addresses: Iterable[str],
    *,
    concurrency: int = 3,
    pause_sec: float = 0.15,
) -> WarmupReport:
    """Resolve every distinct address through the cache with a fixed number of workers."""
    report = WarmupReport()
    queue: asyncio.Queue[str] = asyncio.Queue()

    for address in dict.fromkeys(address.strip() for address in addresses):
        if not address:
            continue
        report.total += 1
        if address in cache:
            report.already_cached += 1
        else:
            queue.put_nowait(address)

    logger.info(
        "warming geocode cache: %d addresses, %d already cached, %d workers",
        report.total,
        report.already_cached,
        concurrency,
    )

    async def worker() -> None:
        while True:
            try:
                address = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            if await cache.resolve(address) is None:
                report.failed += 1
            else:
                report.resolved += 1
            if pause_sec > 0:
                await asyncio.sleep(pause_sec)

    await asyncio.gather(*(worker() for _ in range(max(1, concurrency))))
    logger.info("warmup done: %d resolved, %d failed", report.resolved, report.failed)
    return report
