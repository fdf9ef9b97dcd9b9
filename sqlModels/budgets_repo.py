# sqlModels/budgets_repo.py
from __future__ import annotations

import sqlite3
from typing import Any, Optional

from .utils import dumps_int_list, loads_int_list, now_iso

# Colunas gravadas a partir do dict do cabeçalho (id/created_at/updated_at à parte)
HEADER_COLS = (
    "client_id",
    "notes",
    "discount_percentage",
    "invoice_percentage",
    "payment_method_id",
    "payment_type_id",
    "shipping_option_id",
    "shipping_cost",
    "local_delivery_info",
    "installments",
    "check_installments",
    "check_due_dates",
    "boleto_installments",
    "boleto_due_dates",
    "cep_destino",
    "status",
    "created_by",
)

_JSON_LISTS = ("check_due_dates", "boleto_due_dates")


def _header_values(header: dict) -> list[Any]:
    vals: list[Any] = []
    for c in HEADER_COLS:
        v = header.get(c)
        if c in _JSON_LISTS:
            vals.append(dumps_int_list(v))
        elif c in ("discount_percentage", "invoice_percentage", "shipping_cost"):
            vals.append(float(v or 0.0))
        elif c in ("installments", "check_installments", "boleto_installments"):
            vals.append(int(v or 1))
        elif c == "status":
            vals.append(str(v or "processing"))
        else:
            vals.append("" if v is None else str(v))
    return vals


def _insert_items(con: sqlite3.Connection, budget_id: int, items: list[dict]) -> None:
    rows = []
    for pos, it in enumerate(items or []):
        code = it.get("product_code")
        rows.append((
            int(budget_id),
            pos,
            str(it.get("product_id") or ""),
            (str(code) if code else None),
            int(it.get("quantity") or 0),
            float(it.get("unit_price") or 0.0),
            float(it.get("discount_percentage") or 0.0),
        ))
    con.executemany(
        """
        INSERT INTO budget_items(
            budget_id, position, product_id, product_code,
            quantity, unit_price, discount_percentage
        )
        VALUES(?,?,?,?,?,?,?)
        """,
        rows,
    )


def insert_budget(con: sqlite3.Connection, header: dict, items: list[dict]) -> int:
    """
    header: dict com as chaves de HEADER_COLS (+ created_at opcional)
    items: na ordem em que aparecem no orçamento
    """
    now = now_iso()
    cols = list(HEADER_COLS) + ["created_at", "updated_at"]
    vals = _header_values(header) + [str(header.get("created_at") or now), now]
    cur = con.execute(
        f"INSERT INTO budgets({', '.join(cols)}) VALUES({','.join(['?'] * len(cols))})",
        tuple(vals),
    )
    budget_id = int(cur.lastrowid)
    _insert_items(con, budget_id, items)
    return budget_id


def update_budget(con: sqlite3.Connection, budget_id: int, header: dict, items: list[dict]) -> None:
    """Regrava o cabeçalho e substitui todos os itens."""
    sets = ", ".join(f"{c} = ?" for c in HEADER_COLS)
    con.execute(
        f"UPDATE budgets SET {sets}, updated_at = ? WHERE id = ?",
        tuple(_header_values(header) + [now_iso(), int(budget_id)]),
    )
    con.execute("DELETE FROM budget_items WHERE budget_id = ?", (int(budget_id),))
    _insert_items(con, budget_id, items)


def update_budget_status(con: sqlite3.Connection, budget_id: int, status: str) -> None:
    con.execute(
        "UPDATE budgets SET status = ?, updated_at = ? WHERE id = ?",
        (str(status), now_iso(), int(budget_id)),
    )


def get_budget_header(con: sqlite3.Connection, budget_id: int) -> Optional[dict]:
    r = con.execute("SELECT * FROM budgets WHERE id = ?", (int(budget_id),)).fetchone()
    if not r:
        return None
    d = dict(r)
    for c in _JSON_LISTS:
        d[c] = loads_int_list(d.get(c))
    return d


def get_budget_items(con: sqlite3.Connection, budget_id: int) -> list[dict]:
    rows = con.execute(
        """
        SELECT product_id, product_code, quantity, unit_price, discount_percentage
        FROM budget_items
        WHERE budget_id = ?
        ORDER BY position, id
        """,
        (int(budget_id),),
    ).fetchall()
    return [dict(r) for r in rows]


def delete_budget(con: sqlite3.Connection, budget_id: int) -> None:
    con.execute("DELETE FROM budgets WHERE id = ?", (int(budget_id),))


def list_budgets(
    con: sqlite3.Connection,
    *,
    search_text: str = "",
    status: str = "",
    limit: int = 200,
    offset: int = 0,
) -> tuple[list[dict], int]:
    st = (search_text or "").strip()
    where = []
    params: list[Any] = []

    if st:
        like = f"%{st}%"
        where.append(
            """
            (
                b.created_at LIKE ?
                OR CAST(b.id AS TEXT) LIKE ?
                OR c.name LIKE ?
                OR b.notes LIKE ?
                OR b.status LIKE ? OR REPLACE(b.status,'_',' ') LIKE ?
            )
            """
        )
        params.extend([like] * 6)

    if status:
        where.append("b.status = ?")
        params.append(str(status))

    where_sql = ("WHERE " + " AND ".join(where)) if where else ""

    total = int(con.execute(
        f"""
        SELECT COUNT(*) AS n
        FROM budgets b LEFT JOIN clients c ON c.id = b.client_id
        {where_sql}
        """,
        tuple(params),
    ).fetchone()["n"])

    rows = con.execute(
        f"""
        SELECT
            b.id, b.created_at, b.status, b.client_id,
            COALESCE(c.name, '') AS client_name,
            (SELECT COUNT(*) FROM budget_items bi WHERE bi.budget_id = b.id) AS n_items
        FROM budgets b LEFT JOIN clients c ON c.id = b.client_id
        {where_sql}
        ORDER BY b.created_at DESC, b.id DESC
        LIMIT ? OFFSET ?
        """,
        tuple(params + [int(limit), int(offset)]),
    ).fetchall()
    return [dict(r) for r in rows], total
