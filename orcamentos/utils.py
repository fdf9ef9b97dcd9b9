# orcamentos/utils.py
from __future__ import annotations

import math
import re
import datetime
import unicodedata

from .config import APP_CURRENCY


def nz(x, default=0.0):
    try:
        f = float(x)
        if math.isnan(f) or math.isinf(f):
            return default
        return f
    except (TypeError, ValueError):
        return default


def _symbol(cur: str) -> str:
    c = (cur or "").upper()

    # Real
    if c == "BRL":
        return "R$"

    # Dólar
    if c == "USD":
        return "US$"

    # Euro
    if c == "EUR":
        return "€"

    return c


def _group_pt_br(n: float) -> str:
    # 1234567.891 -> "1.234.567,89"
    return f"{n:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def fmt_money(n: float, currency: str | None = None) -> str:
    """
    Único ponto onde valores monetários são arredondados (2 casas).
    Ex: "R$ 1.234,56", "-R$ 10,00".
    """
    n = nz(n, 0.0)
    sym = _symbol(currency or APP_CURRENCY)
    if round(n, 2) < 0:
        return f"-{sym} {_group_pt_br(abs(n))}"
    return f"{sym} {_group_pt_br(abs(n))}"


def fmt_percent(p: float) -> str:
    p = nz(p, 0.0)
    if abs(p - round(p)) < 1e-9:
        return f"{int(round(p))}%"
    return f"{p:.2f}".rstrip("0").rstrip(".").replace(".", ",") + "%"


def to_date(value) -> datetime.date:
    """Aceita date, datetime ou string ISO ("2024-01-01", "2024-01-01T10:00:00Z")."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    s = str(value or "").strip()
    if not s:
        raise ValueError("data vazia")
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(s).date()
    except ValueError:
        return datetime.date.fromisoformat(s[:10])


def fmt_date(value) -> str:
    try:
        return to_date(value).strftime("%d/%m/%Y")
    except ValueError:
        return ""


def only_alnum(text: str) -> str:
    # "José & Filhos" -> "JoseFilhos"
    norm = unicodedata.normalize("NFKD", str(text or ""))
    norm = "".join(ch for ch in norm if not unicodedata.combining(ch))
    return re.sub(r"[^A-Za-z0-9]+", "", norm)


def fmt_budget_number(budget_id) -> str:
    # 42 -> "#O00000042" ; orçamento ainda não salvo -> "#O--------"
    try:
        return f"#O{int(budget_id):08d}"
    except (TypeError, ValueError):
        return "#O--------"
