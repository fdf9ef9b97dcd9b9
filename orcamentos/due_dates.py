# orcamentos/due_dates.py
from __future__ import annotations

import datetime
from typing import NamedTuple, Sequence

from .utils import to_date, fmt_date


class DueDate(NamedTuple):
    installment_number: int
    days: int
    due_date: datetime.date


def due_dates(anchor, offsets: Sequence[int]) -> list[datetime.date]:
    """dueDates[i] = anchor + offsets[i] dias. Sem prazos -> lista vazia."""
    if not offsets:
        return []
    base = to_date(anchor)
    return [base + datetime.timedelta(days=int(d)) for d in offsets]


def schedule(anchor, offsets: Sequence[int]) -> list[DueDate]:
    return [
        DueDate(i + 1, int(days), dt)
        for i, (days, dt) in enumerate(zip(offsets, due_dates(anchor, offsets)))
    ]


def resize_offsets(count: int) -> list[int]:
    """
    Novo número de parcelas: os prazos voltam a zero. Nunca reaproveita os
    prazos da contagem anterior.
    """
    n = int(count or 0)
    return [0] * max(n, 0)


def set_offset(offsets: Sequence[int], index: int, days: int) -> list[int]:
    out = list(offsets)
    if not 0 <= index < len(out):
        raise IndexError(f"Parcela inexistente: {index + 1} de {len(out)}")
    d = int(days)
    if d < 0:
        raise ValueError("O prazo não pode ser negativo")
    out[index] = d
    return out


def format_due_dates(anchor, offsets: Sequence[int], *, skip_unset: bool = True) -> str:
    """
    "1º: 30 dias (31/01/2024), 2º: 60 dias (01/03/2024)".
    Prazo 0 significa "ainda não definido" e não é exibido.
    """
    parts = []
    for dd in schedule(anchor, offsets):
        if skip_unset and dd.days == 0:
            continue
        parts.append(f"{dd.installment_number}º: {dd.days} dias ({fmt_date(dd.due_date)})")
    return ", ".join(parts)


def format_due_dates_short(anchor, offsets: Sequence[int]) -> str:
    # Só as datas, como no PDF: "31/01/2024, 01/03/2024"
    return ", ".join(fmt_date(dd.due_date) for dd in schedule(anchor, offsets) if dd.days != 0)
