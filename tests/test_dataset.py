"""Tests for CSV loading."""

import pytest

from pdv_locator.dataset import Catalog, iter_links, load_products, load_stores, parse_bool, parse_float
from pdv_locator.exceptions import DatasetError


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def catalog_files(tmp_path):
    products = _write(
        tmp_path / "produtos.csv",
        "ID;Nome;Volume;Em_Destaque;Imagem_URL\n"
        "12345;Cerveja Pilsen;350ml;TRUE;https://img/1.png\n"
        "09123;Refrigerante;2L;sim;\n"
        ";Sem id;1L;true;\n"
        "55555;Água;500ml;nao;\n",
    )
    stores = _write(
        tmp_path / "pdvs.csv",
        "id;nome;rua;bairro;cidade;estado;cep;endereco;latitude;longitude\n"
        "A;Mercado A;Rua XV;Centro;Joinville;SC;89201-100;Rua XV, 10;-26,30;-48,84\n"
        "B;Mercado B;Rua 2;América;Joinville;SC;89204000;;;\n"
        ";Sem id;;;;;;;;\n",
    )
    links = _write(
        tmp_path / "links.csv",
        "produto_id;pdv_id\n"
        "12345;A\n"
        "12345;B\n"
        "12345;B\n"
        "09123;;\n",
    )
    return products, stores, links


def test_load_products_with_mixed_case_headers(catalog_files):
    """Product headers should be matched case-insensitively."""
    products = load_products(catalog_files[0])

    assert [product.id for product in products] == ["12345", "09123", "55555"]
    assert products[0].name == "Cerveja Pilsen"
    assert products[0].size == "350ml"
    assert products[0].image_url == "https://img/1.png"
    assert [product.highlighted for product in products] == [True, True, False]


def test_load_stores_parses_comma_decimals_and_postal_code(catalog_files):
    """Store coordinates should accept comma decimals and CEPs keep digits only."""
    stores = load_stores(catalog_files[1])

    assert [store.id for store in stores] == ["A", "B"]
    assert stores[0].latitude == -26.30
    assert stores[0].longitude == -48.84
    assert stores[0].postal_code == "89201100"
    assert stores[0].address == "Rua XV, 10"
    assert stores[1].coordinates is None
    assert stores[1].neighborhood == "América"


def test_links_are_streamed_without_dedup(catalog_files):
    """Link rows should be yielded as they appear, duplicates included."""
    links = list(iter_links(catalog_files[2]))

    assert [(link.product_id, link.store_id) for link in links] == [("12345", "A"), ("12345", "B"), ("12345", "B")]


def test_comma_separated_file_with_aliases(tmp_path):
    """Comma-separated files with alias headers should load."""
    path = _write(
        tmp_path / "pdvs.csv",
        "PDV_ID,Loja,Logradouro,Municipio,UF,CEP,Lat,Lng\n"
        "7,Loja Sete,Rua Sete,Blumenau,SC,89010-000,-26.91,-49.06\n",
    )

    [store] = load_stores(path)

    assert store.id == "7"
    assert store.name == "Loja Sete"
    assert store.street == "Rua Sete"
    assert store.city == "Blumenau"
    assert store.state == "SC"
    assert store.coordinates is not None


def test_link_table_alternative_headers(tmp_path):
    """The link table should accept alternative header names."""
    path = _write(tmp_path / "links.csv", "codigo;id_pdv\n91123;X\n")

    [link] = list(iter_links(path))

    assert link.product_id == "91123"
    assert link.store_id == "X"


def test_bom_and_tab_separator(tmp_path):
    """A BOM and tab separators should be handled."""
    path = tmp_path / "produtos.csv"
    path.write_text("\ufeffid\tnome\tvol\tdestaque\n1\tSuco\t1L\tyes\n", encoding="utf-8")

    [product] = load_products(path)

    assert product.id == "1"
    assert product.size == "1L"
    assert product.highlighted is True


def test_half_coordinates_are_dropped(tmp_path):
    """A store with only one coordinate should have none."""
    path = _write(tmp_path / "pdvs.csv", "id;nome;latitude;longitude\nZ;Z;-26.3;\n")

    [store] = load_stores(path)

    assert store.latitude is None
    assert store.longitude is None


@pytest.mark.parametrize("value, expected", [("TRUE", True), ("1", True), ("Sim", True), ("yes", True), ("t", True), ("false", False), ("", False), (None, False)])
def test_parse_bool(value, expected):
    """parse_bool() should accept the known truthy spellings."""
    assert parse_bool(value) is expected


@pytest.mark.parametrize("value, expected", [("-26,30", -26.30), (" 1.5 ", 1.5), ("", None), ("abc", None), ("nan", None), ("inf", None), (None, None)])
def test_parse_float(value, expected):
    """parse_float() should accept comma decimals and reject non-finite values."""
    assert parse_float(value) == expected


def test_catalog_reload_and_queries(catalog_files):
    """Catalog should load all files and answer product queries."""
    catalog = Catalog(*catalog_files)
    catalog.reload()

    assert len(catalog.products) == 3
    assert set(catalog.stores) == {"A", "B"}
    assert len(catalog.links) == 3
    assert catalog.product("09123").name == "Refrigerante"
    assert [product.id for product in catalog.highlighted_products()] == ["12345", "09123"]
    assert [product.id for product in catalog.search_products("ceRVEJA")] == ["12345"]
    assert [product.id for product in catalog.search_products("2l")] == ["09123"]
    assert catalog.search_products("  ") == []


def test_catalog_missing_file_raises(tmp_path, catalog_files):
    """A missing CSV should raise DatasetError."""
    catalog = Catalog(tmp_path / "missing.csv", catalog_files[1], catalog_files[2])

    with pytest.raises(DatasetError):
        catalog.reload()
