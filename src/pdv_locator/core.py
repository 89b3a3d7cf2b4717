"""Wiring of catalog, geocode cache, providers and resolver."""

from pdv_locator.cache import GeocodeCache
from pdv_locator.config import Settings
from pdv_locator.dataset import Catalog
from pdv_locator.providers.base import BaseGeocodeProvider, BasePostalCodeProvider
from pdv_locator.resolver import StoreResolver


def _build_geocode_provider(settings: Settings) -> BaseGeocodeProvider:
    from pdv_locator.providers.opencage import OpenCageProvider

    return OpenCageProvider(
        api_key=settings.opencage_key,
        url=settings.opencage_url,
        timeout_sec=settings.geocode_timeout_sec,
        max_concurrency=settings.geocode_max_concurrency,
    )


def _build_postal_provider(settings: Settings) -> BasePostalCodeProvider:
    from pdv_locator.providers.awesomeapi import AwesomeApiCepProvider

    return AwesomeApiCepProvider(url=settings.cep_lookup_url, timeout_sec=settings.cep_timeout_sec)


def build_catalog(settings: Settings, *, load: bool = True) -> Catalog:
    catalog = Catalog(settings.products_csv, settings.stores_csv, settings.links_csv)
    if load:
        catalog.reload()
    return catalog


def build_cache(settings: Settings, provider: BaseGeocodeProvider | None = None) -> GeocodeCache:
    return GeocodeCache(settings.geocode_cache_file, provider or _build_geocode_provider(settings))


def build_resolver(
    settings: Settings | None = None,
    *,
    catalog: Catalog | None = None,
    geocode_provider: BaseGeocodeProvider | None = None,
    postal_provider: BasePostalCodeProvider | None = None,
) -> StoreResolver:
    """Build a ready-to-use StoreResolver.

    Args:
        settings: Settings to use. Defaults to Settings.from_env().
        catalog: Pre-loaded catalog. Loaded from the configured CSVs otherwise.
        geocode_provider: Address geocoder. Defaults to OpenCage.
        postal_provider: CEP lookup. Defaults to AwesomeAPI.

    Returns:
        StoreResolver sharing one GeocodeCache for the whole process.
    """
    settings = settings or Settings.from_env()
    return StoreResolver(
        catalog if catalog is not None else build_catalog(settings),
        build_cache(settings, geocode_provider),
        postal_provider or _build_postal_provider(settings),
        max_results=settings.max_results,
    )


async def close_resolver(resolver: StoreResolver) -> None:
    await resolver.cache.provider.aclose()
    if resolver.postal_provider is not None:
        await resolver.postal_provider.aclose()
