# sqlModels/products_repo.py
from __future__ import annotations

import sqlite3
from typing import Any, Iterable

import pandas as pd

from .utils import now_iso, to_float


def upsert_products(con: sqlite3.Connection, df: pd.DataFrame) -> int:
    """
    Espera um df com colunas:
      id, name, internal_code (opcional), price, stock (opcional)
    Retorna quantas linhas foram gravadas.
    """
    if df is None or df.empty:
        return 0

    now = now_iso()
    rows: list[tuple] = []
    for _, r in df.iterrows():
        pid = str(r.get("id") or "").strip()
        if not pid or pid.lower() == "nan":
            continue
        name = r.get("name")
        name = "" if name is None or (not isinstance(name, str) and pd.isna(name)) else str(name).strip()
        code = r.get("internal_code")
        code = "" if code is None or (not isinstance(code, str) and pd.isna(code)) else str(code).strip()
        rows.append((
            pid,
            name,
            code,
            to_float(r.get("price"), 0.0),
            to_float(r.get("stock"), 0.0),
            now,
        ))

    con.executemany(
        """
        INSERT INTO products(id, name, internal_code, price, stock, updated_at)
        VALUES(?,?,?,?,?,?)
        ON CONFLICT(id) DO UPDATE SET
            name=excluded.name,
            internal_code=excluded.internal_code,
            price=excluded.price,
            stock=excluded.stock,
            updated_at=excluded.updated_at
        """,
        rows,
    )
    return len(rows)


def get_products_by_ids(con: sqlite3.Connection, ids: Iterable[str]) -> dict[str, dict]:
    wanted = sorted({str(i) for i in ids if i})
    if not wanted:
        return {}
    placeholders = ",".join(["?"] * len(wanted))
    rows = con.execute(
        f"SELECT id, name, internal_code, price, stock FROM products WHERE id IN ({placeholders})",
        tuple(wanted),
    ).fetchall()
    return {str(r["id"]): dict(r) for r in rows}


def list_products(
    con: sqlite3.Connection,
    *,
    search_text: str = "",
    limit: int = 200,
    offset: int = 0,
) -> tuple[list[dict], int]:
    st = (search_text or "").strip()
    where = ""
    params: list[Any] = []
    if st:
        like = f"%{st}%"
        where = "WHERE name LIKE ? OR internal_code LIKE ? OR id LIKE ?"
        params.extend([like, like, like])

    total = int(con.execute(f"SELECT COUNT(*) AS n FROM products {where}", tuple(params)).fetchone()["n"])
    rows = con.execute(
        f"""
        SELECT id, name, internal_code, price, stock
        FROM products {where}
        ORDER BY name
        LIMIT ? OFFSET ?
        """,
        tuple(params + [int(limit), int(offset)]),
    ).fetchall()
    return [dict(r) for r in rows], total
