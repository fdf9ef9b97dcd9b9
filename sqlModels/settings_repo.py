# sqlModels/settings_repo.py
from __future__ import annotations

import sqlite3

from .utils import now_iso


def get_setting(con: sqlite3.Connection, key: str, default: str = "") -> str:
    k = str(key or "").strip()
    if not k:
        return default
    r = con.execute("SELECT value FROM system_configurations WHERE key = ?", (k,)).fetchone()
    return str(r["value"]) if r and r["value"] is not None else default


def set_setting(con: sqlite3.Connection, key: str, value: str) -> None:
    k = str(key or "").strip()
    if not k:
        return
    v = "" if value is None else str(value)
    con.execute(
        """
        INSERT INTO system_configurations(key, value, updated_at) VALUES(?,?,?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
        """,
        (k, v, now_iso()),
    )


def delete_setting(con: sqlite3.Connection, key: str) -> None:
    con.execute("DELETE FROM system_configurations WHERE key = ?", (str(key or "").strip(),))


def ensure_defaults(con: sqlite3.Connection, defaults: dict[str, str]) -> None:
    for k, v in (defaults or {}).items():
        con.execute(
            "INSERT OR IGNORE INTO system_configurations(key, value, updated_at) VALUES(?, ?, ?)",
            (str(k), "" if v is None else str(v), now_iso()),
        )
