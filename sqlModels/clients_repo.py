# sqlModels/clients_repo.py
from __future__ import annotations

import sqlite3
from typing import Any, Optional

_COLS = ("id", "name", "email", "phone", "street", "number", "neighborhood", "city", "state", "cep")


def get_client(con: sqlite3.Connection, client_id: str) -> Optional[dict]:
    if not client_id:
        return None
    r = con.execute(
        f"SELECT {', '.join(_COLS)} FROM clients WHERE id = ?",
        (str(client_id),),
    ).fetchone()
    return dict(r) if r else None


def upsert_client(con: sqlite3.Connection, **fields: Any) -> None:
    cid = str(fields.get("id") or "").strip()
    if not cid:
        raise ValueError("Cliente sem id")
    vals = [cid] + [str(fields.get(c) or "") for c in _COLS[1:]]
    updates = ", ".join(f"{c}=excluded.{c}" for c in _COLS[1:])
    con.execute(
        f"""
        INSERT INTO clients({', '.join(_COLS)}) VALUES({','.join(['?'] * len(_COLS))})
        ON CONFLICT(id) DO UPDATE SET {updates}
        """,
        tuple(vals),
    )


def list_clients(
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
        where = "WHERE name LIKE ? OR email LIKE ? OR phone LIKE ? OR city LIKE ?"
        params.extend([like, like, like, like])

    total = int(con.execute(f"SELECT COUNT(*) AS n FROM clients {where}", tuple(params)).fetchone()["n"])
    rows = con.execute(
        f"SELECT {', '.join(_COLS)} FROM clients {where} ORDER BY name LIMIT ? OFFSET ?",
        tuple(params + [int(limit), int(offset)]),
    ).fetchall()
    return [dict(r) for r in rows], total
