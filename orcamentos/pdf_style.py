# orcamentos/pdf_style.py
"""
Configuração visual do PDF de orçamento.

O banco guarda só as chaves alteradas (JSON esparso em
system_configurations["pdf_budget_config"]). A configuração efetiva é
DEFAULT_STYLE com o JSON salvo mesclado por cima, campo a campo e em
profundidade: salvar só sections.clientInfo.padding.top não apaga
padding.left/right/bottom.

Problemas ao carregar (JSON quebrado, banco fora do ar) nunca impedem a
exportação: registramos no log e seguimos com os padrões.
"""
from __future__ import annotations

import copy
import datetime
import json
import re
import sqlite3
from typing import Any, Mapping

from .config import COMPANY_NAME
from .logging_setup import get_logger
from .models import SECTION_NAMES

import sqlModels.settings_repo as settings_repo

log = get_logger(__name__)

STYLE_SETTING_KEY = "pdf_budget_config"

NEUTRAL_GRAY = (128, 128, 128)

HEADER_VARIANTS = ("bar", "banner", "none")
LOGO_POSITIONS = ("left", "center", "right")
FONT_FAMILIES = ("helvetica", "times", "courier")


def _box(top, right, bottom, left) -> dict:
    return {"top": top, "right": right, "bottom": bottom, "left": left}


def _card_section(font_size: int) -> dict:
    return {
        "fontSize": font_size,
        "backgroundColor": "#F7FAFC",
        "borderColor": "#E2E8F0",
        "borderWidth": 1,
        "lineSpacing": 4,
        "showBorder": True,
        "padding": _box(5, 5, 5, 5),
        "titleMargin": _box(8, 0, 8, 0),
    }


DEFAULT_STYLE: dict[str, Any] = {
    "page": {
        "margins": _box(15, 15, 20, 15),
    },
    "header": {
        "logoUrl": "",
        "height": 25,
        "backgroundColor": "#0EA5E9",
        "companyName": COMPANY_NAME,
        "showLogo": True,
        "variant": "bar",
        "logoPosition": "left",
        "showCompanyName": True,
        "titleText": "Proposta Comercial",
    },
    "footer": {
        "height": 20,
        "validityText": "Este orçamento tem validade de 30 dias a partir da data de emissão.",
        "copyrightText": f"{COMPANY_NAME} - {datetime.date.today().year}",
    },
    "fonts": {
        "title": 18,
        "subtitle": 14,
        "normal": 10,
        "small": 9,
        "family": "helvetica",
    },
    "colors": {
        "primary": "#0EA5E9",
        "dark": "#1F2937",
        "gray": "#6B7280",
        "secondary": "#0EA5E9",
    },
    "sections": {
        "clientInfo": _card_section(10),
        "paymentInfo": _card_section(9),
        "financialSummary": {
            "fontSize": 10,
            "lineSpacing": 5,
            "labelFontSize": 10,
            "totalFontSize": 11,
            "totalColor": "#FFFFFF",
        },
        "tableHeaders": {
            "fontSize": 10,
            "color": "#FFFFFF",
        },
    },
    "layout": {
        "sectionOrder": list(SECTION_NAMES),
        "show": {name: True for name in SECTION_NAMES},
        "sectionSpacing": 8,
    },
    "table": {
        "showColumns": {"quantity": True, "unitPrice": True, "discount": True, "total": True},
        "columnWidths": {"item": 50, "quantity": 10, "unitPrice": 15, "discount": 10, "total": 15},
        "headerBackgroundColor": "#0EA5E9",
        "zebraColor": "#F8F8F8",
        "rowHeight": 10,
    },
}


# =====================================================
# Mescla
# =====================================================

def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    dict + dict -> recursão chave a chave; qualquer outro tipo (lista, número,
    texto) substitui o valor de base. Não altera nenhum dos argumentos.
    """
    out = copy.deepcopy(dict(base))
    for key, val in (override or {}).items():
        cur = out.get(key)
        if isinstance(cur, Mapping) and isinstance(val, Mapping):
            out[key] = deep_merge(cur, val)
        else:
            out[key] = copy.deepcopy(val)
    return out


def _parse_partial(partial) -> dict[str, Any] | None:
    if partial is None:
        return None
    if isinstance(partial, (bytes, bytearray)):
        partial = partial.decode("utf-8", errors="replace")
    if isinstance(partial, str):
        if not partial.strip():
            return None
        try:
            partial = json.loads(partial)
        except ValueError:
            log.error("Configuração do PDF com JSON inválido; usando padrões")
            return None
    if not isinstance(partial, Mapping):
        log.error("Configuração do PDF não é um objeto (%s); usando padrões", type(partial).__name__)
        return None
    return dict(partial)


# =====================================================
# Validação (tipo a tipo, guiada pelos padrões)
# =====================================================

def _coerce_like(default, value):
    """Devolve value no tipo de default, ou default se não der."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, (int, float)):
        if isinstance(value, bool):
            return default
        try:
            v = float(value)
        except (TypeError, ValueError):
            return default
        if v != v or v < 0:
            return default
        return int(v) if isinstance(default, int) and v.is_integer() else v
    if isinstance(default, str):
        return value if isinstance(value, str) else default
    return value


def _validate_tree(defaults: Mapping[str, Any], cfg: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, val in cfg.items():
        if key not in defaults:
            out[key] = val
            continue
        d = defaults[key]
        if isinstance(d, Mapping):
            out[key] = _validate_tree(d, val) if isinstance(val, Mapping) else copy.deepcopy(d)
        elif isinstance(d, list):
            out[key] = val if isinstance(val, list) else list(d)
        else:
            out[key] = _coerce_like(d, val)
    return out


def _one_of(value, allowed, default):
    v = str(value or "").strip().lower()
    return v if v in allowed else default


def validate_style(cfg: Mapping[str, Any]) -> dict[str, Any]:
    out = _validate_tree(DEFAULT_STYLE, cfg)

    hdr = out["header"]
    hdr["variant"] = _one_of(hdr.get("variant"), HEADER_VARIANTS, DEFAULT_STYLE["header"]["variant"])
    hdr["logoPosition"] = _one_of(hdr.get("logoPosition"), LOGO_POSITIONS, DEFAULT_STYLE["header"]["logoPosition"])
    out["fonts"]["family"] = _one_of(out["fonts"].get("family"), FONT_FAMILIES, DEFAULT_STYLE["fonts"]["family"])

    # Ordem das seções: só nomes conhecidos, sem repetição
    order: list[str] = []
    for name in out["layout"].get("sectionOrder") or []:
        if isinstance(name, str) and name in SECTION_NAMES and name not in order:
            order.append(name)
    out["layout"]["sectionOrder"] = order if order else list(SECTION_NAMES)
    return out


# =====================================================
# API pública
# =====================================================

def default_style() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_STYLE)


def resolve_style(partial=None) -> dict[str, Any]:
    """partial: None, dict ou texto JSON (esparso). Sempre devolve a árvore completa."""
    parsed = _parse_partial(partial)
    if not parsed:
        return default_style()
    return validate_style(deep_merge(DEFAULT_STYLE, parsed))


def load_style(con: sqlite3.Connection | None) -> dict[str, Any]:
    if con is None:
        return default_style()
    try:
        raw = settings_repo.get_setting(con, STYLE_SETTING_KEY, "")
    except sqlite3.Error:
        log.exception("Erro ao carregar configurações do PDF; usando padrões")
        return default_style()
    return resolve_style(raw)


def save_style(con: sqlite3.Connection, partial: Mapping[str, Any]) -> None:
    """Guarda só o que foi informado; a mescla acontece na leitura."""
    if not isinstance(partial, Mapping):
        raise ValueError("A configuração do PDF deve ser um objeto JSON")
    settings_repo.set_setting(con, STYLE_SETTING_KEY, json.dumps(partial, ensure_ascii=False))


def reset_style(con: sqlite3.Connection) -> None:
    settings_repo.delete_setting(con, STYLE_SETTING_KEY)


# =====================================================
# Cores
# =====================================================

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")
_HEX3_RE = re.compile(r"^#?([0-9a-fA-F])([0-9a-fA-F])([0-9a-fA-F])$")


def hex_to_rgb(value, fallback: tuple[int, int, int] = NEUTRAL_GRAY) -> tuple[int, int, int]:
    s = str(value or "").strip()
    m = _HEX_RE.match(s)
    if m:
        return tuple(int(g, 16) for g in m.groups())
    m = _HEX3_RE.match(s)
    if m:
        return tuple(int(g * 2, 16) for g in m.groups())
    log.warning("Cor inválida %r; usando cinza neutro", value)
    return fallback
