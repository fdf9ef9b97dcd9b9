import pandas as pd
import pytest

import sqlModels.products_repo as products_repo
from orcamentos.dataio import read_products_sheet


def _xlsx(tmp_path, data):
    path = tmp_path / "produtos.xlsx"
    pd.DataFrame(data).to_excel(path, index=False, engine="openpyxl")
    return str(path)


def test_read_products_with_header_variations(tmp_path):
    path = _xlsx(tmp_path, {
        "Código": [1001, "PAR-02"],
        "Nome do Produto": ["Parafuso", "Porca"],
        "Preço": [12.5, 3],
        "Quantidade": [10, 0],
    })
    df = read_products_sheet(path)
    assert list(df.columns) == ["id", "name", "internal_code", "price", "stock"]
    assert df["id"].tolist() == ["1001", "PAR-02"]
    assert df["price"].tolist() == [12.5, 3.0]
    assert df["stock"].tolist() == [10.0, 0.0]


def test_rows_without_code_are_skipped(tmp_path):
    path = _xlsx(tmp_path, {"codigo": ["A1", None], "nome": ["Arruela", "Sem código"], "preco": [1, 2]})
    df = read_products_sheet(path)
    assert df["id"].tolist() == ["A1"]


def test_missing_columns_and_missing_file(tmp_path):
    path = _xlsx(tmp_path, {"foo": [1], "bar": [2]})
    with pytest.raises(ValueError):
        read_products_sheet(path)
    with pytest.raises(FileNotFoundError):
        read_products_sheet(str(tmp_path / "nao_existe.xlsx"))


def test_upsert_products(con, tmp_path):
    df = read_products_sheet(_xlsx(tmp_path, {"codigo": ["A1"], "nome": ["Arruela"], "preco": ["1.234,56"]}))
    assert products_repo.upsert_products(con, df) == 1
    rows, total = products_repo.list_products(con, search_text="arru")
    assert total == 1
    assert rows[0]["price"] == pytest.approx(1234.56)
    assert products_repo.get_products_by_ids(con, ["A1", "zz"]).keys() == {"A1"}
