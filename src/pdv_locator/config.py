"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pdv_locator.providers.awesomeapi import CEP_LOOKUP_URL
from pdv_locator.providers.opencage import OPENCAGE_URL
from pdv_locator.resolver import DEFAULT_MAX_RESULTS


def _safe_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _safe_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    products_csv: Path
    stores_csv: Path
    links_csv: Path
    geocode_cache_file: Path
    opencage_key: str | None = None
    opencage_url: str = OPENCAGE_URL
    geocode_timeout_sec: float = 10.0
    geocode_max_concurrency: int = 3
    cep_lookup_url: str = CEP_LOOKUP_URL
    cep_timeout_sec: float = 10.0
    max_results: int = DEFAULT_MAX_RESULTS
    warm_concurrency: int = 3
    admin_token: str | None = None
    frontend_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "Settings":
        data_dir = Path(os.getenv("PDV_DATA_DIR", "data"))
        raw_origins = os.getenv("FRONTEND_ORIGINS", "*")
        return cls(
            products_csv=Path(os.getenv("PRODUCTS_CSV") or data_dir / "produtos.csv"),
            stores_csv=Path(os.getenv("STORES_CSV") or data_dir / "pontos_de_venda_final.csv"),
            links_csv=Path(os.getenv("PDV_PRODUCTS_CSV") or data_dir / "pdv_produtos_filtrado_final.csv"),
            geocode_cache_file=Path(os.getenv("GEOCODE_CACHE_FILE") or data_dir / "geocode_cache.json"),
            opencage_key=os.getenv("OPENCAGE_KEY") or None,
            opencage_url=os.getenv("OPENCAGE_URL", OPENCAGE_URL),
            geocode_timeout_sec=_safe_float(os.getenv("GEOCODE_TIMEOUT_SEC"), 10.0),
            geocode_max_concurrency=max(1, _safe_int(os.getenv("GEOCODE_MAX_CONCURRENCY"), 3)),
            cep_lookup_url=os.getenv("CEP_LOOKUP_URL", CEP_LOOKUP_URL),
            cep_timeout_sec=_safe_float(os.getenv("CEP_TIMEOUT_SEC"), 10.0),
            max_results=max(1, _safe_int(os.getenv("MAX_RESULTS"), DEFAULT_MAX_RESULTS)),
            warm_concurrency=max(1, _safe_int(os.getenv("WARM_CONCURRENCY"), 3)),
            admin_token=os.getenv("ADMIN_TOKEN") or None,
            frontend_origins=tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip()) or ("*",),
        )
