"""CSV loading for products, stores and the product/store association table."""

from __future__ import annotations

import csv
import logging
import math
from collections.abc import Iterator
from pathlib import Path

from pdv_locator.address import POSTAL_CODE_DIGITS, only_digits
from pdv_locator.exceptions import DatasetError
from pdv_locator.schema import Product, ProductStoreLink, Store

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ";"
CANDIDATE_DELIMITERS = ";,\t"
TRUE_VALUES = {"true", "1", "sim", "yes", "t"}

# Accepted header names per logical field, tried in order.
PRODUCT_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "codigo", "produto_id"),
    "name": ("nome", "name", "produto"),
    "size": ("volume", "vol", "tamanho", "size"),
    "highlighted": ("em_destaque", "destaque", "highlighted"),
    "image_url": ("imagem_url", "image_url", "imagem"),
}
STORE_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "pdv_id", "id_pdv"),
    "name": ("nome", "loja", "name"),
    "street": ("rua", "logradouro", "street"),
    "neighborhood": ("bairro", "neighborhood"),
    "city": ("cidade", "city", "municipio"),
    "state": ("estado", "uf", "state"),
    "postal_code": ("cep", "postal_code"),
    "address": ("endereco", "endereço", "address"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon", "lng"),
}
LINK_FIELDS: dict[str, tuple[str, ...]] = {
    "product_id": ("produto_id", "codigo", "product_id"),
    "store_id": ("pdv_id", "id_pdv", "store_id", "id"),
}


def parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in TRUE_VALUES


def parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    text = value.strip().replace(",", ".")
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def pick(row: dict[str, str], aliases: tuple[str, ...]) -> str:
    """Return the first non-blank value among the aliased columns."""
    for alias in aliases:
        value = row.get(alias)
        if value is not None and value.strip():
            return value.strip()
    return ""


def _sniff_delimiter(header_line: str) -> str:
    counts = {delimiter: header_line.count(delimiter) for delimiter in CANDIDATE_DELIMITERS}
    best = max(counts, key=lambda delimiter: counts[delimiter])
    return best if counts[best] else DEFAULT_DELIMITER


def read_rows(path: str | Path) -> Iterator[dict[str, str]]:
    """Stream rows of a CSV file as dicts keyed by lower-cased header names."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            header_line = f.readline()
            if not header_line.strip():
                return
            delimiter = _sniff_delimiter(header_line)
            headers = [name.strip().lower() for name in next(csv.reader([header_line], delimiter=delimiter))]
            for values in csv.reader(f, delimiter=delimiter):
                if not any(value.strip() for value in values):
                    continue
                yield dict(zip(headers, values))
    except OSError as exc:
        raise DatasetError(f"cannot read {path}: {exc}") from exc


def load_products(path: str | Path) -> list[Product]:
    products: list[Product] = []
    skipped = 0
    for row in read_rows(path):
        product_id = pick(row, PRODUCT_FIELDS["id"])
        if not product_id:
            skipped += 1
            continue
        products.append(
            Product(
                id=product_id,
                name=pick(row, PRODUCT_FIELDS["name"]),
                size=pick(row, PRODUCT_FIELDS["size"]),
                highlighted=parse_bool(pick(row, PRODUCT_FIELDS["highlighted"])),
                image_url=pick(row, PRODUCT_FIELDS["image_url"]),
            )
        )
    if skipped:
        logger.debug("skipped %d product rows without id in %s", skipped, path)
    return products


def load_stores(path: str | Path) -> list[Store]:
    stores: list[Store] = []
    skipped = 0
    for row in read_rows(path):
        store_id = pick(row, STORE_FIELDS["id"])
        if not store_id:
            skipped += 1
            continue
        latitude = parse_float(pick(row, STORE_FIELDS["latitude"]))
        longitude = parse_float(pick(row, STORE_FIELDS["longitude"]))
        if latitude is None or longitude is None:
            latitude = longitude = None
        stores.append(
            Store(
                id=store_id,
                name=pick(row, STORE_FIELDS["name"]),
                street=pick(row, STORE_FIELDS["street"]),
                neighborhood=pick(row, STORE_FIELDS["neighborhood"]),
                city=pick(row, STORE_FIELDS["city"]),
                state=pick(row, STORE_FIELDS["state"]),
                postal_code=only_digits(pick(row, STORE_FIELDS["postal_code"]), POSTAL_CODE_DIGITS),
                address=pick(row, STORE_FIELDS["address"]),
                latitude=latitude,
                longitude=longitude,
            )
        )
    if skipped:
        logger.debug("skipped %d store rows without id in %s", skipped, path)
    return stores


def iter_links(path: str | Path) -> Iterator[ProductStoreLink]:
    for row in read_rows(path):
        product_id = pick(row, LINK_FIELDS["product_id"])
        store_id = pick(row, LINK_FIELDS["store_id"])
        if product_id and store_id:
            yield ProductStoreLink(product_id=product_id, store_id=store_id)


class Catalog:
    """Process-wide snapshot of the three datasets, refreshed by reload()."""

    def __init__(
        self,
        products_path: str | Path,
        stores_path: str | Path,
        links_path: str | Path,
    ):
        self.products_path = Path(products_path)
        self.stores_path = Path(stores_path)
        self.links_path = Path(links_path)
        self.products: list[Product] = []
        self.stores: dict[str, Store] = {}
        self.links: list[ProductStoreLink] = []
        self._product_index: dict[str, Product] = {}

    @classmethod
    def from_records(
        cls,
        products: list[Product] | None = None,
        stores: list[Store] | None = None,
        links: list[ProductStoreLink] | None = None,
    ) -> "Catalog":
        """Build an in-memory catalog without touching the filesystem."""
        catalog = cls("", "", "")
        catalog._install(products or [], stores or [], links or [])
        return catalog

    def reload(self) -> None:
        products = load_products(self.products_path)
        stores = load_stores(self.stores_path)
        links = list(iter_links(self.links_path))
        self._install(products, stores, links)
        logger.info(
            "catalog loaded: %d products, %d stores, %d links",
            len(self.products),
            len(self.stores),
            len(self.links),
        )

    def product(self, product_id: str) -> Product | None:
        return self._product_index.get(product_id)

    def highlighted_products(self) -> list[Product]:
        return [product for product in self.products if product.highlighted]

    def search_products(self, query: str) -> list[Product]:
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            product
            for product in self.products
            if needle in product.name.lower() or needle in product.size.lower()
        ]

    def _install(self, products: list[Product], stores: list[Store], links: list[ProductStoreLink]) -> None:
        store_index: dict[str, Store] = {}
        for store in stores:
            store_index.setdefault(store.id, store)
        self.products = products
        self.stores = store_index
        self.links = links
        self._product_index = {}
        for product in products:
            self._product_index.setdefault(product.id, product)
