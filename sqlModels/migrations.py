# sqlModels/migrations.py
from __future__ import annotations

import sqlite3


def column_names(con: sqlite3.Connection, table: str) -> set[str]:
    """Colunas da tabela em minúsculas; vazio se a tabela não existe."""
    rows = con.execute(f"PRAGMA table_info({table})").fetchall()
    return {str(r["name"]).lower() for r in rows}


def _add_column_if_missing(con: sqlite3.Connection, table: str, col: str, col_def_sql: str) -> None:
    """
    col_def_sql exemplo: "TEXT NOT NULL DEFAULT ''"
    """
    if col.lower() in column_names(con, table):
        return
    con.execute(f"ALTER TABLE {table} ADD COLUMN {col} {col_def_sql}")


def mig_2(con: sqlite3.Connection) -> None:
    """
    v2: entrega local / vendedor responsável
    - budgets.local_delivery_info, budgets.cep_destino, budgets.created_by
    - status legado em pt-BR -> valores novos
    """
    _add_column_if_missing(con, "budgets", "local_delivery_info", "TEXT NOT NULL DEFAULT ''")
    _add_column_if_missing(con, "budgets", "cep_destino", "TEXT NOT NULL DEFAULT ''")
    _add_column_if_missing(con, "budgets", "created_by", "TEXT NOT NULL DEFAULT ''")

    if "status" in column_names(con, "budgets"):
        con.execute("UPDATE budgets SET status='processing' WHERE status IN ('processando', 'PROCESSANDO')")
        con.execute(
            "UPDATE budgets SET status='awaiting_approval' "
            "WHERE status IN ('aguardando_aprovacao', 'AGUARDANDO_APROVACAO')"
        )
        con.execute("UPDATE budgets SET status='approved' WHERE status IN ('aprovado', 'APROVADO')")


# v1 é o schema base; só versões com mudança aparecem aqui
MIGRATIONS = {
    2: mig_2,
}
