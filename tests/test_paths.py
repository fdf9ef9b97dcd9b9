import os

import orcamentos.db_path as db_path
import orcamentos.paths as paths
from orcamentos.delivery import save_artifact


def test_db_override_is_used_when_writable(monkeypatch, tmp_path):
    monkeypatch.setattr(db_path, "_CACHED_DB_PATH", None)
    target = str(tmp_path / "sub" / "base.sqlite3")
    monkeypatch.setattr(db_path, "DB_PATH_OVERRIDE", target)
    assert db_path.resolve_db_path(force_refresh=True) == target
    assert os.path.isdir(tmp_path / "sub")


def test_db_falls_back_to_data_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(db_path, "_CACHED_DB_PATH", None)
    monkeypatch.setattr(db_path, "DB_PATH_OVERRIDE", "")
    monkeypatch.setattr(db_path, "data_dir", lambda: str(tmp_path))
    assert db_path.resolve_db_path(force_refresh=True) == str(tmp_path / "orcamentos.sqlite3")


def test_output_dir_override_and_name_collisions(monkeypatch, tmp_path):
    out = str(tmp_path / "pdfs")
    monkeypatch.setattr(paths, "OUTPUT_DIR_OVERRIDE", out)
    assert paths.output_dir() == out

    first = save_artifact(b"%PDF-1", "Quote_X_2024-05-10.pdf", out)
    second = save_artifact(b"%PDF-2", "Quote_X_2024-05-10.pdf", out)
    assert os.path.basename(first) == "Quote_X_2024-05-10.pdf"
    assert os.path.basename(second) == "Quote_X_2024-05-10 (2).pdf"
