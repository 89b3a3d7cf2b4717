"""Tests for environment settings."""

from pathlib import Path

from pdv_locator.config import Settings

ENV_VARS = [
    "PDV_DATA_DIR",
    "PRODUCTS_CSV",
    "STORES_CSV",
    "PDV_PRODUCTS_CSV",
    "GEOCODE_CACHE_FILE",
    "OPENCAGE_KEY",
    "GEOCODE_TIMEOUT_SEC",
    "GEOCODE_MAX_CONCURRENCY",
    "MAX_RESULTS",
    "WARM_CONCURRENCY",
    "ADMIN_TOKEN",
    "FRONTEND_ORIGINS",
]


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    """Settings should default to the files under data/."""
    _clear(monkeypatch)

    settings = Settings.from_env()

    assert settings.products_csv == Path("data/produtos.csv")
    assert settings.stores_csv == Path("data/pontos_de_venda_final.csv")
    assert settings.links_csv == Path("data/pdv_produtos_filtrado_final.csv")
    assert settings.geocode_cache_file == Path("data/geocode_cache.json")
    assert settings.opencage_key is None
    assert settings.max_results == 20
    assert settings.admin_token is None
    assert settings.frontend_origins == ("*",)


def test_overrides(monkeypatch, tmp_path):
    """Environment variables should override the defaults."""
    _clear(monkeypatch)
    monkeypatch.setenv("PDV_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORES_CSV", "/srv/pdvs.csv")
    monkeypatch.setenv("OPENCAGE_KEY", "key")
    monkeypatch.setenv("MAX_RESULTS", "5")
    monkeypatch.setenv("GEOCODE_TIMEOUT_SEC", "2.5")
    monkeypatch.setenv("FRONTEND_ORIGINS", "http://localhost:3000, https://app.example.com")

    settings = Settings.from_env()

    assert settings.products_csv == tmp_path / "produtos.csv"
    assert settings.stores_csv == Path("/srv/pdvs.csv")
    assert settings.opencage_key == "key"
    assert settings.max_results == 5
    assert settings.geocode_timeout_sec == 2.5
    assert settings.frontend_origins == ("http://localhost:3000", "https://app.example.com")


def test_invalid_numbers_fall_back(monkeypatch):
    """Unparseable numbers should fall back to the defaults."""
    _clear(monkeypatch)
    monkeypatch.setenv("MAX_RESULTS", "many")
    monkeypatch.setenv("GEOCODE_TIMEOUT_SEC", "soon")
    monkeypatch.setenv("WARM_CONCURRENCY", "0")

    settings = Settings.from_env()

    assert settings.max_results == 20
    assert settings.geocode_timeout_sec == 10.0
    assert settings.warm_concurrency == 1
