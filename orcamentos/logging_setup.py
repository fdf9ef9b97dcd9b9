# orcamentos/logging_setup.py
import os, logging, sys
from . import config

_LEVEL_MAP = {
    "ERROR":   logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO":    logging.INFO,
    "DEBUG":   logging.DEBUG,
}

# Loggers criados por get_logger(); init_logging() os reconfigura
_MANAGED: set[str] = set()


def _build_formatter() -> logging.Formatter:
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    return logging.Formatter(fmt, datefmt)


def _get_log_file() -> str:
    try: os.makedirs(config.LOG_DIR, exist_ok=True)
    except OSError: pass
    return os.path.join(config.LOG_DIR, "app.log")


def _attach_handlers(logger: logging.Logger, level: int) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    # Arquivo (se a pasta não for gravável, fica só o console)
    try:
        fh = logging.FileHandler(_get_log_file(), encoding="utf-8")
        fh.setLevel(level); fh.setFormatter(_build_formatter())
        logger.addHandler(fh)
    except OSError:
        pass
    # Console (stderr)
    ch = logging.StreamHandler(stream=sys.stderr)
    ch.setLevel(level); ch.setFormatter(_build_formatter())
    logger.addHandler(ch)

    logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    level = _LEVEL_MAP.get(str(config.LOG_LEVEL).upper(), logging.INFO)
    _attach_handlers(logger, level)
    _MANAGED.add(name)
    return logger


def init_logging(level: str | None = None, log_dir: str | None = None) -> None:
    """Troca nível/pasta em tempo de execução e reaplica nos loggers já criados."""
    if log_dir:
        config.LOG_DIR = log_dir
    if level:
        lv = str(level).upper()
        config.LOG_LEVEL = lv if lv in _LEVEL_MAP else "INFO"

    lvl = _LEVEL_MAP.get(config.LOG_LEVEL, logging.INFO)
    for name in list(_MANAGED):
        _attach_handlers(logging.getLogger(name), lvl)
