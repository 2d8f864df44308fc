"""
LedgerWorkbook: builder for the styled summary + transactions workbook.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from cashflow.analytics.common import dsum
from cashflow.excel.styles import TITLE_FONT, SUBTITLE_FONT, SECTION_FONT
from cashflow.excel.formatters import cell_value, fit_columns, kpi_card, style_cell, style_header


ColSpec = tuple[str, str, str]  # (key, col_type, label)


@dataclass(frozen=True)
class KpiCard:
    value: Decimal | int
    label: str
    fmt: str = "currency"
    signed: bool = False


class LedgerWorkbook:
    """Sheets are created in order; the first call reuses the default sheet."""

    CARD_SPACING = 2

    def __init__(self) -> None:
        self.wb = Workbook()
        self._fresh = True

    def sheet(self, title: str) -> Worksheet:
        if self._fresh:
            self._fresh = False
            ws = self.wb.active
            ws.title = title
            return ws
        return self.wb.create_sheet(title=title)

    def banner(self, ws: Worksheet, title: str, subtitle: str, width: int = 8) -> int:
        """Merged title and subtitle across `width` columns. Returns the next free row."""
        for row, text, font in ((1, title, TITLE_FONT), (2, subtitle, SUBTITLE_FONT)):
            ws.cell(row=row, column=1, value=text).font = font
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
        for col in range(1, width + 1):
            ws.column_dimensions[get_column_letter(col)].width = 18
        return 4

    def section(self, ws: Worksheet, row: int, title: str) -> int:
        ws.cell(row=row, column=1, value=title).font = SECTION_FONT
        return row + 2

    def cards(self, ws: Worksheet, row: int, cards: Sequence[KpiCard]) -> int:
        for i, card in enumerate(cards):
            kpi_card(ws, row, 1 + i * self.CARD_SPACING, card.value, card.label, card.fmt, card.signed)
        return row + 3

    def pairs(self, ws: Worksheet, row: int, items: dict) -> int:
        """Two-column key/value listing."""
        for key, value in items.items():
            ws.cell(row=row, column=1, value=key)
            ws.cell(row=row, column=2, value=str(value))
            row += 1
        return row

    def table(
        self,
        ws: Worksheet,
        columns: Sequence[ColSpec],
        rows: Sequence[dict],
        tags: Optional[Sequence[Optional[str]]] = None,
        start_row: int = 1,
        total_label: Optional[str] = "TOTAL",
    ) -> int:
        """Header, body, and (when rows exist) a total row over the currency columns.

        `tags` holds one highlight name per body row. The header row is frozen.
        Returns the row after the last one written.
        """
        for col, (_, _, label) in enumerate(columns, 1):
            ws.cell(row=start_row, column=col, value=label)
        style_header(ws[start_row][:len(columns)])

        row = start_row
        for i, data in enumerate(rows):
            row += 1
            tag = tags[i] if tags else None
            for col, (key, col_type, _) in enumerate(columns, 1):
                style_cell(ws.cell(row=row, column=col, value=cell_value(data.get(key))), col_type, tag=tag)

        if rows and total_label:
            row += 1
            for col, (key, col_type, _) in enumerate(columns, 1):
                if col == 1:
                    value, col_type = total_label, "text"
                elif col_type == "currency":
                    value = cell_value(dsum(r.get(key) or Decimal(0) for r in rows))
                else:
                    value, col_type = None, "text"
                style_cell(ws.cell(row=row, column=col, value=value), col_type, total=True)

        fit_columns(ws)
        ws.freeze_panes = ws.cell(row=start_row + 1, column=1)
        return row + 1

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
