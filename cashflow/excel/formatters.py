"""
Cell-level formatting for ledger workbooks.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Iterable

from openpyxl.cell.cell import Cell, MergedCell
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from cashflow.excel.styles import (
    HEADER_FONT, HEADER_FILL, HEADER_BORDER,
    DATA_FONT, TOTAL_FONT,
    THIN_BORDER, TOTAL_BORDER,
    ALTERNATE_FILL, TOTAL_FILL,
    KPI_VALUE_FONT, KPI_LABEL_FONT, POSITIVE_KPI_FONT, NEGATIVE_KPI_FONT,
    CENTER, LEFT, RIGHT,
    HIGHLIGHT_FILLS, BRL_FORMAT, BRL_KPI_FORMAT, DATE_FORMAT,
)
from cashflow.data.schemas import SENTINEL_DATE

NUMBER_FORMATS = {
    "currency": BRL_FORMAT,
    "number": "#,##0",
    "date": DATE_FORMAT,
}
KPI_FORMATS = {
    "currency": BRL_KPI_FORMAT,
    "number": "#,##0",
}
ALIGNMENTS = {
    "currency": RIGHT,
    "number": RIGHT,
    "date": CENTER,
}


def cell_value(value):
    """openpyxl-friendly value: Decimal → float, sentinel dates → blank."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dt.date) and value == SENTINEL_DATE:
        return None
    return value


def style_header(cells: Iterable[Cell]) -> None:
    for cell in cells:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
        cell.border = HEADER_BORDER


def style_cell(cell: Cell, col_type: str = "text", total: bool = False, tag: str | None = None) -> None:
    """Font, border, number format and fill for one table cell.

    `tag` names a row highlight (paid / overdue / pending); untagged body rows
    are striped.
    """
    cell.font = TOTAL_FONT if total else DATA_FONT
    cell.border = TOTAL_BORDER if total else THIN_BORDER
    cell.alignment = ALIGNMENTS.get(col_type, LEFT)
    if col_type in NUMBER_FORMATS:
        cell.number_format = NUMBER_FORMATS[col_type]

    if total:
        cell.fill = TOTAL_FILL
    elif tag in HIGHLIGHT_FILLS:
        cell.fill = HIGHLIGHT_FILLS[tag]
    elif cell.row % 2 == 0:
        cell.fill = ALTERNATE_FILL


def fit_columns(ws: Worksheet, min_width: int = 10, max_width: int = 50) -> None:
    """Size each column to its longest rendered value, ignoring merged cells."""
    widths: dict[int, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            if isinstance(cell, MergedCell) or cell.value is None:
                continue
            widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = min(max(width + 2, min_width), max_width)


def kpi_card(ws: Worksheet, row: int, col: int, value, label: str,
             fmt: str = "currency", signed: bool = False) -> None:
    """Big value over a small caption; signed cards go green or red with the sign."""
    top = ws.cell(row=row, column=col, value=cell_value(value))
    if signed:
        top.font = POSITIVE_KPI_FONT if value >= 0 else NEGATIVE_KPI_FONT
    else:
        top.font = KPI_VALUE_FONT
    top.alignment = CENTER
    if fmt in KPI_FORMATS:
        top.number_format = KPI_FORMATS[fmt]

    caption = ws.cell(row=row + 1, column=col, value=label)
    caption.font = KPI_LABEL_FONT
    caption.alignment = CENTER
