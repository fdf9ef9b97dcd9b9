# orcamentos/db_path.py
from __future__ import annotations

import os
import sqlite3

from .config import DB_PATH_OVERRIDE
from .paths import data_dir
from .logging_setup import get_logger

log = get_logger(__name__)

_CACHED_DB_PATH: str | None = None


def _can_write_sqlite(db_path: str) -> bool:
    try:
        d = os.path.dirname(db_path)
        if d:
            os.makedirs(d, exist_ok=True)
        con = sqlite3.connect(db_path)
        try:
            con.execute("CREATE TABLE IF NOT EXISTS __write_test(x INTEGER)")
            con.execute("DROP TABLE __write_test")
            con.commit()
        finally:
            con.close()
        return True
    except (OSError, sqlite3.Error) as e:
        log.warning("Não foi possível gravar o banco em %s (%s)", db_path, e)
        return False


def resolve_db_path(*, force_refresh: bool = False) -> str:
    """
    1) ORCAMENTOS_DB / config "db_path"   (se gravável)
    2) Documentos/Orcamentos/data/orcamentos.sqlite3

    O resultado fica em cache para não repetir o teste de escrita.
    """
    global _CACHED_DB_PATH

    if _CACHED_DB_PATH and not force_refresh:
        return _CACHED_DB_PATH

    if DB_PATH_OVERRIDE and _can_write_sqlite(DB_PATH_OVERRIDE):
        _CACHED_DB_PATH = DB_PATH_OVERRIDE
        log.info("Banco (override): %s", DB_PATH_OVERRIDE)
        return DB_PATH_OVERRIDE

    primary = os.path.join(data_dir(), "orcamentos.sqlite3")
    if _can_write_sqlite(primary):
        _CACHED_DB_PATH = primary
        log.info("Banco: %s", primary)
        return primary

    _CACHED_DB_PATH = primary
    log.error("Não foi possível validar escrita do banco. Usando mesmo assim: %s", primary)
    return primary
