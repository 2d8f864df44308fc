"""
Semicolon-delimited CSV export of a filtered ledger.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Sequence

import pandas as pd
from loguru import logger

from cashflow.analytics.common import format_decimal_comma
from cashflow.config import CSV_DELIMITER, CSV_EXPORT_COLUMNS, REPORTS_FOLDER
from cashflow.data.normalize import is_sentinel
from cashflow.data.schemas import Transaction


def export_filename(now: dt.datetime | None = None) -> str:
    now = now or dt.datetime.now()
    return f"export_{now:%Y%m%dT%H%M%S}.csv"


def _export_value(value) -> str:
    if isinstance(value, Decimal):
        return format_decimal_comma(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dt.date):
        return "" if is_sentinel(value) else value.isoformat()
    return "" if value is None else str(value)


def to_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """One row per transaction, export labels as column names, all cells already text."""
    keys = [key for key, _ in CSV_EXPORT_COLUMNS]
    labels = [label for _, label in CSV_EXPORT_COLUMNS]
    records = [[_export_value(getattr(t, key)) for key in keys] for t in transactions]
    return pd.DataFrame(records, columns=labels, dtype=str)


def export_csv(transactions: Sequence[Transaction]) -> str:
    return to_frame(transactions).to_csv(sep=CSV_DELIMITER, index=False, lineterminator="\n")


def write_csv(
    transactions: Sequence[Transaction],
    output_dir: str | Path = REPORTS_FOLDER,
    now: dt.datetime | None = None,
) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(now)
    path.write_text(export_csv(transactions), encoding="utf-8")
    logger.info(f"CSV export: {len(transactions)} rows -> {path}")
    return path
