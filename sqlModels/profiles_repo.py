# sqlModels/profiles_repo.py
from __future__ import annotations

import sqlite3
from typing import Optional


def get_role(con: sqlite3.Connection, user_id: str) -> Optional[str]:
    r = con.execute("SELECT role FROM profiles WHERE id = ?", (str(user_id),)).fetchone()
    if not r or r["role"] is None:
        return None
    return str(r["role"])


def get_full_name(con: sqlite3.Connection, user_id: str) -> str:
    if not user_id:
        return ""
    r = con.execute("SELECT full_name FROM profiles WHERE id = ?", (str(user_id),)).fetchone()
    return str(r["full_name"] or "") if r else ""


def upsert_profile(con: sqlite3.Connection, *, id: str, full_name: str = "", email: str = "",
                   role: str = "cliente") -> None:
    con.execute(
        """
        INSERT INTO profiles(id, full_name, email, role) VALUES(?,?,?,?)
        ON CONFLICT(id) DO UPDATE SET
            full_name=excluded.full_name, email=excluded.email, role=excluded.role
        """,
        (str(id), str(full_name or ""), str(email or ""), str(role or "cliente")),
    )
