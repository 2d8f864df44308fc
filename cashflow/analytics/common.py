"""
Money and serialization helpers used across the analytics and report modules.
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import math
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable

import numpy as np
import pandas as pd

CENT = Decimal("0.01")


def dsum(values: Iterable[Decimal]) -> Decimal:
    """Exact Decimal sum; Decimal("0") for an empty iterable."""
    total = Decimal("0")
    for v in values:
        total += v
    return total


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_decimal_comma(value: Decimal) -> str:
    """Two places, comma as decimal separator, no thousands grouping: 1234.5 -> "1234,50"."""
    return f"{to_cents(value):.2f}".replace(".", ",")


def format_brl(value: Decimal) -> str:
    """pt-BR currency: 1234.5 -> "R$ 1.234,50"."""
    q = to_cents(value)
    sign = "-" if q < 0 else ""
    text = f"{abs(q):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def format_date_br(day: dt.date | None, sentinel: dt.date = dt.date(1970, 1, 1)) -> str:
    if day is None or day == sentinel:
        return "-"
    return f"{day:%d/%m/%Y}"


def sanitize_for_json(obj):
    """Recursively convert Decimal/date/enum/dataclass/numpy values to JSON-native types."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        if hasattr(obj, "to_dict"):
            return sanitize_for_json(obj.to_dict())
        return sanitize_for_json({f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)})
    if isinstance(obj, dict):
        return {str(k): sanitize_for_json(v) for k, v in obj.items() if k is not None}
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        # amounts leave as whole cents
        return float(to_cents(obj))
    if isinstance(obj, (dt.date, dt.datetime)):
        return obj.isoformat()
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        v = float(obj)
        return 0.0 if (math.isnan(v) or math.isinf(v)) else v
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    if pd.api.types.is_scalar(obj) and pd.isna(obj):
        return None
    return obj
