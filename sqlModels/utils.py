# sqlModels/utils.py
from __future__ import annotations

import datetime
import json
import math


def now_iso() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


def dumps_int_list(values) -> str:
    return json.dumps([int(v) for v in (values or [])])


def loads_int_list(raw) -> list[int]:
    """'[30, 60]' -> [30, 60]. Texto inválido -> []."""
    if raw is None:
        return []
    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        return []
    if not isinstance(data, list):
        return []
    out: list[int] = []
    for v in data:
        try:
            out.append(int(v))
        except (TypeError, ValueError):
            continue
    return out


def to_float(val, default=0.0) -> float:
    try:
        if val is None:
            return default
        if isinstance(val, str):
            txt = val.strip().replace(" ", "")
            if not txt:
                return default
            # "1.234,56" (pt-BR) -> 1234.56 ; "1,234.56" -> 1234.56
            if "," in txt and "." in txt:
                if txt.rfind(",") > txt.rfind("."):
                    txt = txt.replace(".", "").replace(",", ".")
                else:
                    txt = txt.replace(",", "")
            elif "," in txt:
                txt = txt.replace(",", ".")
            f = float(txt)
        else:
            f = float(val)
        if math.isnan(f) or math.isinf(f):
            return default
        return f
    except (TypeError, ValueError):
        return default
