# orcamentos/paths.py
import os

from .config import app_root_dir, OUTPUT_DIR_OVERRIDE


def user_docs_dir(subfolder: str) -> str:
    d = os.path.join(app_root_dir(), subfolder)
    os.makedirs(d, exist_ok=True)
    return d


def data_dir() -> str:
    return user_docs_dir("data")


def output_dir() -> str:
    """Onde os PDFs exportados são gravados (config "output_dir" ou Documentos)."""
    if OUTPUT_DIR_OVERRIDE:
        os.makedirs(OUTPUT_DIR_OVERRIDE, exist_ok=True)
        return OUTPUT_DIR_OVERRIDE
    return user_docs_dir("orcamentos")
