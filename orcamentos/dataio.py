# orcamentos/dataio.py
import os
import pandas as pd

from .logging_setup import get_logger

from sqlModels.utils import to_float

log = get_logger(__name__)


def _column_finder(df: pd.DataFrame):
    cols_lower = {str(c).strip().lower(): c for c in df.columns}

    def col(*cands, exact: bool = False):
        # Igualdade (normalizada em minúsculas) primeiro, depois "contém"
        for cnd in cands:
            cnd_l = cnd.lower()
            if cnd_l in cols_lower:
                return cols_lower[cnd_l]
        if exact:
            return None
        for key, orig in cols_lower.items():
            for cnd in cands:
                if cnd.lower() in key:
                    return orig
        return None

    return col


def _cell(row, column) -> str:
    if column is None:
        return ""
    v = row.get(column, "")
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return ""
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def read_products_sheet(path: str, sheet_name=0, header: int = 0) -> pd.DataFrame:
    """
    Planilha de produtos -> DataFrame(id, name, internal_code, price, stock).
    Cabeçalhos aceitos com variações (código/codigo/id, nome/descrição, preço/valor, estoque/quantidade).
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Planilha não encontrada: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        df = pd.read_csv(path, sep=None, engine="python", dtype=str)
    else:
        df = pd.read_excel(path, sheet_name=sheet_name, header=header, engine="openpyxl")
    df = df.dropna(how="all")
    col = _column_finder(df)

    col_id = col("id", "sku", exact=True)  # "id" está dentro de "quantidade"
    col_codigo = col("codigo interno", "código interno", "codigo", "código", "cod.", "referencia", "referência")
    col_nome = col("nome", "nombre", "descricao", "descrição", "produto")
    col_preco = col("preco", "preço", "valor unitario", "valor unitário", "valor", "price")
    col_estoque = col("estoque", "quantidade", "qtd", "stock")

    if col_nome is None or (col_id is None and col_codigo is None):
        raise ValueError("A planilha precisa das colunas de nome e código (ou id)")

    records = []
    for _, row in df.iterrows():
        codigo = _cell(row, col_codigo)
        pid = _cell(row, col_id) or codigo
        nome = _cell(row, col_nome)
        if not pid and not nome:
            continue
        if not pid:
            log.warning("Linha sem código ignorada: %s", nome)
            continue
        records.append({
            "id": pid,
            "name": nome,
            "internal_code": codigo,
            "price": to_float(row.get(col_preco, 0) if col_preco is not None else 0, 0.0),
            "stock": to_float(row.get(col_estoque, 0) if col_estoque is not None else 0, 0.0),
        })

    log.info("Planilha %s: %d produto(s)", os.path.basename(path), len(records))
    return pd.DataFrame(records, columns=["id", "name", "internal_code", "price", "stock"])
