from contextlib import asynccontextmanager
import logging
from pathlib import Path
import sys

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Ensure local src package is importable in serverless runtime.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pdv_locator.config import Settings  # noqa: E402
from pdv_locator.core import build_catalog, build_resolver, close_resolver  # noqa: E402
from pdv_locator.exceptions import DatasetError, InvalidInputError, PostalCodeNotFoundError  # noqa: E402
from pdv_locator.resolver import StoreResolver  # noqa: E402
from pdv_locator.schema import NearbyStore, Product, Store  # noqa: E402

logger = logging.getLogger(__name__)
SETTINGS = Settings.from_env()


_resolver: StoreResolver | None = None


# Runs on the event loop so the shared cache is only ever touched from one thread.
async def get_resolver() -> StoreResolver:
    global _resolver
    if _resolver is None:
        catalog = build_catalog(SETTINGS, load=False)
        try:
            catalog.reload()
        except DatasetError:
            logger.exception("catalog load failed; serving an empty catalog until reload")
        _resolver = build_resolver(SETTINGS, catalog=catalog)
    return _resolver


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    if not SETTINGS.admin_token:
        raise HTTPException(status_code=403, detail="admin routes are disabled")
    if x_admin_token != SETTINGS.admin_token:
        raise HTTPException(status_code=401, detail="invalid admin token")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    global _resolver
    yield
    if _resolver is not None:
        await close_resolver(_resolver)
        _resolver = None


app = FastAPI(title="pdv-locator API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.frontend_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


class ProductResponse(BaseModel):
    id: str
    name: str
    size: str
    highlighted: bool
    imageUrl: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            size=product.size,
            highlighted=product.highlighted,
            imageUrl=product.image_url,
        )


class StoreResponse(BaseModel):
    id: str
    name: str
    postalCode: str
    address: str
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_store(cls, store: Store) -> "StoreResponse":
        return cls(
            id=store.id,
            name=store.name,
            postalCode=store.postal_code,
            address=store.address,
            latitude=store.latitude,
            longitude=store.longitude,
        )


class NearbyStoreResponse(StoreResponse):
    distanceKm: float | None = None

    @classmethod
    def from_result(cls, item: NearbyStore) -> "NearbyStoreResponse":
        return cls(**item.to_payload())


class CacheClearedResponse(BaseModel):
    cleared: int


class CatalogReloadResponse(BaseModel):
    products: int
    stores: int
    links: int


def _nearby(results: list[NearbyStore]) -> list[NearbyStoreResponse]:
    return [NearbyStoreResponse.from_result(item) for item in results]


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/products", response_model=list[ProductResponse])
async def list_products(resolver: StoreResolver = Depends(get_resolver)) -> list[ProductResponse]:
    return [ProductResponse.from_product(product) for product in resolver.catalog.products]


@app.get("/produtos/destaque", response_model=list[ProductResponse])
async def highlighted_products(resolver: StoreResolver = Depends(get_resolver)) -> list[ProductResponse]:
    return [ProductResponse.from_product(product) for product in resolver.catalog.highlighted_products()]


@app.get("/produtos/buscar", response_model=list[ProductResponse])
async def search_products(
    q: str | None = Query(default=None),
    resolver: StoreResolver = Depends(get_resolver),
) -> list[ProductResponse]:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="search term is required")
    return [ProductResponse.from_product(product) for product in resolver.catalog.search_products(q)]


@app.get("/stores-by-product", response_model=list[StoreResponse])
async def stores_by_product(
    product_id: str | None = Query(default=None, alias="productId"),
    resolver: StoreResolver = Depends(get_resolver),
) -> list[StoreResponse]:
    if not product_id or not product_id.strip():
        raise HTTPException(status_code=400, detail="productId is required")
    return [StoreResponse.from_store(store) for store in resolver.stores_for_product(product_id.strip())]


@app.get("/pdvs/proximos", response_model=list[NearbyStoreResponse])
async def nearest_by_postal_code(
    cep: str | None = Query(default=None),
    resolver: StoreResolver = Depends(get_resolver),
) -> list[NearbyStoreResponse]:
    try:
        results = await resolver.find_stores_near_postal_code(cep)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PostalCodeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _nearby(results)


@app.get("/pdvs/proximos/coords", response_model=list[NearbyStoreResponse])
async def nearest_by_coordinates(
    lat: str | None = Query(default=None),
    lon: str | None = Query(default=None),
    resolver: StoreResolver = Depends(get_resolver),
) -> list[NearbyStoreResponse]:
    try:
        results = await resolver.find_stores_near_coordinates(lat, lon)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _nearby(results)


# GET /pdvs/proximos/produto?productId=ID&lat=-26.30&lon=-48.84
@app.get("/pdvs/proximos/produto", response_model=list[NearbyStoreResponse])
async def nearest_by_product(
    product_id: str | None = Query(default=None, alias="productId"),
    lat: str | None = Query(default=None),
    lon: str | None = Query(default=None),
    resolver: StoreResolver = Depends(get_resolver),
) -> list[NearbyStoreResponse]:
    try:
        results = await resolver.find_stores_for_product(product_id, lat, lon)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("nearest store lookup failed")
        raise HTTPException(status_code=500, detail="internal_error") from exc
    return _nearby(results)


@app.post("/admin/catalog/reload", response_model=CatalogReloadResponse, dependencies=[Depends(require_admin)])
async def reload_catalog(resolver: StoreResolver = Depends(get_resolver)) -> CatalogReloadResponse:
    try:
        resolver.catalog.reload()
    except DatasetError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return CatalogReloadResponse(
        products=len(resolver.catalog.products),
        stores=len(resolver.catalog.stores),
        links=len(resolver.catalog.links),
    )


@app.delete("/admin/geocode-cache", response_model=CacheClearedResponse, dependencies=[Depends(require_admin)])
async def clear_geocode_cache(resolver: StoreResolver = Depends(get_resolver)) -> CacheClearedResponse:
    cleared = len(resolver.cache)
    resolver.cache.clear()
    return CacheClearedResponse(cleared=cleared)
