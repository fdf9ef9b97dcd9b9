# sqlModels/db.py
from __future__ import annotations

import sqlite3
from contextlib import contextmanager

from .schema import DDL, SCHEMA_VERSION
from .migrations import MIGRATIONS, column_names


def connect(db_path: str) -> sqlite3.Connection:
    """
    Conexão do app. check_same_thread=False: a exportação lê o estilo numa
    thread auxiliar enquanto a principal espera.
    """
    con = sqlite3.connect(db_path, check_same_thread=False)
    con.row_factory = sqlite3.Row
    for pragma in ("foreign_keys = ON", "journal_mode = WAL", "busy_timeout = 5000"):
        con.execute(f"PRAGMA {pragma}")
    return con


@contextmanager
def tx(con: sqlite3.Connection):
    try:
        con.execute("BEGIN")
        yield
        con.commit()
    except Exception:
        con.rollback()
        raise


def schema_version(con: sqlite3.Connection) -> int:
    """
    Versão gravada em meta. Bases sem meta (primeira execução ou anteriores
    ao controle de versão) são identificadas pelas colunas de budgets.
    """
    try:
        r = con.execute("SELECT value FROM meta WHERE key = 'schema_version'").fetchone()
    except sqlite3.OperationalError:
        r = None
    if r is not None and str(r["value"]).isdigit():
        return int(r["value"])

    cols = column_names(con, "budgets")
    if not cols:
        return 0
    return 2 if "created_by" in cols else 1


def ensure_schema(con: sqlite3.Connection) -> None:
    """Cria o que falta, migra até SCHEMA_VERSION e grava a versão."""
    with tx(con):
        current = schema_version(con)
        for stmt in DDL:
            con.execute(stmt)
        for v in range(current + 1, SCHEMA_VERSION + 1):
            mig = MIGRATIONS.get(v)
            if mig:
                mig(con)
        con.execute(
            "INSERT INTO meta(key, value) VALUES('schema_version', ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (str(SCHEMA_VERSION),),
        )
