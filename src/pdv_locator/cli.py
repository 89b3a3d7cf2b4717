"""Command-line interface for pdv-locator."""

import argparse
import asyncio
import json
import logging
import sys

from pdv_locator import __version__
from pdv_locator.config import Settings
from pdv_locator.core import build_cache, build_catalog, build_resolver, close_resolver
from pdv_locator.exceptions import PdvLocatorError
from pdv_locator.warmup import store_addresses, warm_cache


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pdv-locator",
        description="Find the nearest points of sale for a product",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pdv-locator {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    warm = commands.add_parser("warm", help="Geocode every store address into the cache")
    warm.add_argument("--concurrency", type=int, help="Parallel geocoder calls (default: WARM_CONCURRENCY)")

    nearest = commands.add_parser("nearest", help="Nearest stores carrying a product")
    nearest.add_argument("--product", required=True, help="Product id")
    nearest.add_argument("--lat", required=True, help="User latitude")
    nearest.add_argument("--lon", required=True, help="User longitude")
    nearest.add_argument("--json", action="store_true", help="Output as JSON")

    near_cep = commands.add_parser("near-cep", help="Nearest stores to a CEP")
    near_cep.add_argument("cep", help="8-digit postal code")
    near_cep.add_argument("--json", action="store_true", help="Output as JSON")

    commands.add_parser("clear-cache", help="Delete the persisted geocode cache")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    settings = Settings.from_env()

    try:
        if args.command == "warm":
            return asyncio.run(_warm(settings, args.concurrency or settings.warm_concurrency))
        if args.command == "clear-cache":
            build_cache(settings).clear()
            return 0
        if args.command == "nearest":
            results = asyncio.run(_nearest(settings, args.product, args.lat, args.lon))
        else:
            results = asyncio.run(_near_cep(settings, args.cep))
    except PdvLocatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(results, indent=2, ensure_ascii=False))
    else:
        _print_formatted(results)
    return 0


async def _warm(settings: Settings, concurrency: int) -> int:
    catalog = build_catalog(settings)
    cache = build_cache(settings)
    try:
        report = await warm_cache(cache, store_addresses(catalog), concurrency=concurrency)
    finally:
        await cache.provider.aclose()
    print(
        f"{report.total} addresses: {report.already_cached} cached, "
        f"{report.resolved} resolved, {report.failed} failed"
    )
    return 0


async def _nearest(settings: Settings, product_id: str, lat: str, lon: str) -> list[dict]:
    resolver = build_resolver(settings)
    try:
        results = await resolver.find_stores_for_product(product_id, lat, lon)
    finally:
        await close_resolver(resolver)
    return [item.to_payload() for item in results]


async def _near_cep(settings: Settings, cep: str) -> list[dict]:
    resolver = build_resolver(settings)
    try:
        results = await resolver.find_stores_near_postal_code(cep)
    finally:
        await close_resolver(resolver)
    return [item.to_payload() for item in results]


def _print_formatted(results: list[dict]) -> None:
    """Print results in human-readable format."""
    if not results:
        print("No stores found.")
        return

    for position, item in enumerate(results, start=1):
        distance = f"{item['distanceKm']:.2f} km" if item["distanceKm"] is not None else "-"
        print(f"  {position:>2}. {item['name'] or item['id']:<40} {distance:>10}")
        if item["address"]:
            print(f"      {item['address']}")


if __name__ == "__main__":
    sys.exit(main())
