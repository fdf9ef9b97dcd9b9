# sqlModels/payments_repo.py
from __future__ import annotations

import sqlite3

# Tabelas de opções com o mesmo formato (id, name, active)
_TABLES = ("payment_methods", "payment_types", "shipping_options")


def _get_name(con: sqlite3.Connection, table: str, option_id: str) -> str:
    if table not in _TABLES:
        raise ValueError(f"Tabela de opções desconhecida: {table}")
    if not option_id:
        return ""
    r = con.execute(f"SELECT name FROM {table} WHERE id = ?", (str(option_id),)).fetchone()
    return str(r["name"] or "") if r else ""


def get_payment_method_name(con: sqlite3.Connection, method_id: str) -> str:
    return _get_name(con, "payment_methods", method_id)


def get_payment_type_name(con: sqlite3.Connection, type_id: str) -> str:
    return _get_name(con, "payment_types", type_id)


def get_shipping_option_name(con: sqlite3.Connection, option_id: str) -> str:
    return _get_name(con, "shipping_options", option_id)


def list_options(con: sqlite3.Connection, table: str, *, only_active: bool = True) -> list[dict]:
    if table not in _TABLES:
        raise ValueError(f"Tabela de opções desconhecida: {table}")
    where = "WHERE active = 1" if only_active else ""
    rows = con.execute(f"SELECT id, name, active FROM {table} {where} ORDER BY name").fetchall()
    return [dict(r) for r in rows]


def upsert_option(con: sqlite3.Connection, table: str, option_id: str, name: str, active: bool = True) -> None:
    if table not in _TABLES:
        raise ValueError(f"Tabela de opções desconhecida: {table}")
    con.execute(
        f"""
        INSERT INTO {table}(id, name, active) VALUES(?,?,?)
        ON CONFLICT(id) DO UPDATE SET name=excluded.name, active=excluded.active
        """,
        (str(option_id), str(name or ""), 1 if active else 0),
    )
