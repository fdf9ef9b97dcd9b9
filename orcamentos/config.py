# orcamentos/config.py
from __future__ import annotations
import os, sys, json
from typing import Dict, Any, Tuple, List

# --------------------------
# Utilidades de rutas
# --------------------------
def _documents_dir() -> str:
    if os.name == "nt":
        try:
            from ctypes import windll, create_unicode_buffer
            CSIDL_PERSONAL = 5
            SHGFP_TYPE_CURRENT = 0
            buf = create_unicode_buffer(260)
            if windll.shell32.SHGetFolderPathW(None, CSIDL_PERSONAL, None, SHGFP_TYPE_CURRENT, buf) == 0:
                return buf.value
        except Exception:
            pass
    return os.path.join(os.path.expanduser("~"), "Documents")


def _ensure_dir(p: str) -> str:
    try:
        os.makedirs(p, exist_ok=True)
    except OSError:
        pass
    return p


# --------------------------
# Detecção da pasta e do arquivo de configuração
# --------------------------
_THIS_DIR = os.path.dirname(os.path.abspath(__file__))


def _candidate_config_dirs() -> List[str]:
    dirs: List[str] = []
    # 1) Executável "frozen" (PyInstaller): pasta ao lado do executável
    if getattr(sys, "frozen", False):
        dirs.append(os.path.join(os.path.dirname(sys.executable), "config"))

    # 2) Pasta "config" relativa ao cwd
    dirs.append(os.path.join(os.getcwd(), "config"))

    # 3) Pasta "config" relativa a este módulo
    dirs.append(os.path.join(_THIS_DIR, "config"))

    out: List[str] = []
    seen: set[str] = set()
    for d in dirs:
        if d not in seen:
            seen.add(d)
            out.append(d)
    return out


def _pick_config_path() -> Tuple[str, str]:
    for d in _candidate_config_dirs():
        for fname in ("config.json", "app_config.json"):
            p = os.path.join(d, fname)
            if os.path.exists(p):
                return d, p
    # Não existe: aponta para o primeiro candidato (não cria nada)
    base = _candidate_config_dirs()[0]
    return base, os.path.join(base, "config.json")


CONFIG_DIR, CONFIG_PATH = _pick_config_path()

# --------------------------
# Defaults + constantes exportadas
# --------------------------
DEFAULT_CONFIG: Dict[str, Any] = {
    "currency": "BRL",
    "company_name": "Sistema de Gestão",

    # Teto de desconto dos vendedores quando o banco não tem "max_discount_sales"
    "max_discount_sales": 10.0,

    # opcionais:
    # "log_dir": "C:/Users/<usuario>/Documents/Orcamentos/logs"
    # "log_level": "INFO"  # ERROR, WARNING, INFO, DEBUG
    # "output_dir": "C:/Users/<usuario>/Documents/Orcamentos/orcamentos"
    # "db_path": "C:/.../app.sqlite3"
}

SUPPORTED_CURRENCIES = ("BRL", "USD", "EUR")


def _load_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, ValueError):
        return {}


def load_app_config(path: str | None = None) -> Dict[str, Any]:
    cfg = DEFAULT_CONFIG.copy()
    raw = _load_json(path or CONFIG_PATH)
    if raw:
        cur = str(raw.get("currency", cfg["currency"])).strip().upper()
        if cur in SUPPORTED_CURRENCIES:
            cfg["currency"] = cur

        name = str(raw.get("company_name") or "").strip()
        if name:
            cfg["company_name"] = name

        try:
            mx = float(raw.get("max_discount_sales", cfg["max_discount_sales"]))
            if 0 <= mx <= 100:
                cfg["max_discount_sales"] = mx
        except (TypeError, ValueError):
            pass

        for key in ("log_dir", "output_dir", "db_path"):
            if key in raw and str(raw[key]).strip():
                cfg[key] = str(raw[key]).strip()
        if "log_level" in raw and str(raw["log_level"]).strip():
            cfg["log_level"] = str(raw["log_level"]).strip().upper()
    return cfg


APP_CONFIG = load_app_config()

# --------------------------
# Parâmetros principais
# --------------------------
APP_CURRENCY: str = APP_CONFIG["currency"]
COMPANY_NAME: str = APP_CONFIG["company_name"]
MAX_DISCOUNT_SALES: float = float(APP_CONFIG["max_discount_sales"])


def _expand(p: str) -> str:
    return os.path.abspath(os.path.expanduser(os.path.expandvars(p)))


def app_root_dir() -> str:
    return os.path.join(_documents_dir(), "Orcamentos")


# --------------------------
# Logging (rotas e nível). Variáveis de ambiente têm prioridade.
# --------------------------
_raw_log_dir = os.environ.get("LOG_DIR") or APP_CONFIG.get("log_dir") or ""
if str(_raw_log_dir).strip():
    LOG_DIR: str = _expand(str(_raw_log_dir).strip())
else:
    LOG_DIR: str = os.path.join(app_root_dir(), "logs")

LOG_LEVEL: str = str(os.environ.get("LOG_LEVEL") or APP_CONFIG.get("log_level", "INFO")).strip().upper()
if LOG_LEVEL not in ("ERROR", "WARNING", "INFO", "DEBUG"):
    LOG_LEVEL = "INFO"

_raw_out = APP_CONFIG.get("output_dir", "")
OUTPUT_DIR_OVERRIDE: str = _expand(_raw_out) if _raw_out else ""

_raw_db = os.environ.get("ORCAMENTOS_DB") or APP_CONFIG.get("db_path", "")
DB_PATH_OVERRIDE: str = _expand(_raw_db) if _raw_db else ""


__all__ = [
    "CONFIG_DIR", "CONFIG_PATH", "DEFAULT_CONFIG", "SUPPORTED_CURRENCIES",
    "APP_CONFIG", "APP_CURRENCY", "COMPANY_NAME", "MAX_DISCOUNT_SALES",
    "load_app_config", "app_root_dir",
    "LOG_DIR", "LOG_LEVEL", "OUTPUT_DIR_OVERRIDE", "DB_PATH_OVERRIDE",
]
