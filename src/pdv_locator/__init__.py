"""pdv-locator: find the nearest points of sale that carry a product."""

from pdv_locator.address import build_address
from pdv_locator.cache import GeocodeCache
from pdv_locator.core import build_resolver
from pdv_locator.dataset import Catalog
from pdv_locator.distance import haversine_km
from pdv_locator.resolver import StoreResolver, candidate_product_ids
from pdv_locator.schema import Coordinates, NearbyStore, Product, ProductStoreLink, Store

__version__ = "0.1.0"

__all__ = [
    "build_address",
    "build_resolver",
    "candidate_product_ids",
    "haversine_km",
    "Catalog",
    "Coordinates",
    "GeocodeCache",
    "NearbyStore",
    "Product",
    "ProductStoreLink",
    "Store",
    "StoreResolver",
    "__version__",
]
