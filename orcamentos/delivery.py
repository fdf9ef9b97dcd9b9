# orcamentos/delivery.py
"""Saída dos documentos gerados e avisos ao usuário."""
from __future__ import annotations

import os

from .logging_setup import get_logger
from .paths import output_dir

log = get_logger(__name__)

_NOTIFY_LEVELS = {"success": "info", "info": "info", "warning": "warning", "error": "error"}


def save_artifact(content: bytes, filename: str, out_dir: str | None = None) -> str:
    """Grava o arquivo; se o nome já existir, acrescenta (2), (3), ..."""
    base_dir = out_dir or output_dir()
    os.makedirs(base_dir, exist_ok=True)

    stem, ext = os.path.splitext(os.path.basename(filename))
    path = os.path.join(base_dir, stem + ext)
    n = 2
    while os.path.exists(path):
        path = os.path.join(base_dir, f"{stem} ({n}){ext}")
        n += 1

    with open(path, "wb") as f:
        f.write(content)
    log.info("Documento salvo: %s (%d bytes)", path, len(content))
    return path


def log_notify(level: str, message: str) -> None:
    """Notificação mínima para a linha de comando: vai para o log."""
    method = _NOTIFY_LEVELS.get(str(level).lower(), "info")
    getattr(log, method)(message)
