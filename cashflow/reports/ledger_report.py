"""
Ledger report: JSON summary, styled Excel workbook, and landscape PDF of a
filtered set of transactions.
"""
from __future__ import annotations

import datetime as dt
import io
from pathlib import Path
from typing import Any, Mapping, Sequence
from xml.sax.saxutils import escape

import pandas as pd
from loguru import logger
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from cashflow.analytics.common import format_brl, format_date_br, sanitize_for_json
from cashflow.analytics.stats import detailed_kpi
from cashflow.analytics.table import LedgerView, overdue_days, render_rows, view_columns, view_summary
from cashflow.config import REPORT_SUBTITLE, REPORT_TITLE
from cashflow.data.normalize import is_sentinel
from cashflow.data.schemas import FilterState, Status, Transaction
from cashflow.data.store import TransactionStore
from cashflow.excel.writer import KpiCard, LedgerWorkbook
from cashflow.reports.selection import (
    ReportMode, ReportOptions, ReportSelection, original_value, select_transactions, settled_value,
)

DEFAULT_ISSUER = "USUÁRIO DO SISTEMA"

REPORT_COLS = [
    ("date", "date", "Data"),
    ("due_date", "date", "Venc."),
    ("payment_date", "date", "Data Baixa"),
    ("description", "text", "Movimentação"),
    ("status", "text", "Status"),
    ("original_value", "currency", "Valor Orig. (Aberto)"),
    ("settled_value", "currency", "Valor Pago (Baixado)"),
    ("client", "text", "Cliente / Favorecido"),
]
RECEIVABLE_EXTRA_COLS = [
    ("tax_id", "text", "N.Cliente"),
]
SECTION_TITLES = {
    ReportMode.GENERAL: "Transações Detalhadas:",
    ReportMode.PAYABLES: "Contas a Pagar (pendentes, por vencimento):",
    ReportMode.RECEIVABLES: "Contas a Receber (pendentes, por vencimento):",
}


def report_rows(transactions: Sequence[Transaction], with_tax_id: bool = False) -> list[dict]:
    rows = []
    for t in transactions:
        row = {
            "date": t.date,
            "due_date": t.due_date,
            "payment_date": t.payment_date,
            "description": t.description,
            "status": t.status.value,
            "original_value": original_value(t),
            "settled_value": settled_value(t),
            "client": t.client,
        }
        if with_tax_id:
            row["tax_id"] = t.tax_id
        rows.append(row)
    return rows


def _highlight(t: Transaction, today: dt.date) -> str | None:
    if t.status == Status.PAID:
        return "paid"
    if overdue_days(t, today) > 0:
        return "overdue"
    return "pending"


def _select(store: TransactionStore, filters, options: ReportOptions | None) -> ReportSelection:
    return select_transactions(store.transactions(), filters, options)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def generate_json(
    store: TransactionStore,
    filters: FilterState | Mapping[str, Any] | None = None,
    view: LedgerView = LedgerView.MIXED,
    options: ReportOptions | None = None,
) -> dict:
    selection = _select(store, filters, options)
    f, filtered = selection.filters, selection.transactions
    view = LedgerView(view)
    dates = [t.date for t in filtered if not is_sentinel(t.date)]
    return sanitize_for_json({
        "date_range": f"{min(dates)} to {max(dates)}" if dates else "N/A",
        "filters": f.active(),
        "view": view,
        **selection.describe(),
        "count": len(filtered),
        "kpi": detailed_kpi(filtered),
        "view_summary": view_summary(filtered, view),
    })


# ---------------------------------------------------------------------------
# Excel
# ---------------------------------------------------------------------------

def generate_excel(
    store: TransactionStore,
    output_path: str | Path,
    filters: FilterState | Mapping[str, Any] | None = None,
    view: LedgerView = LedgerView.MIXED,
    issuer: str | None = None,
    today: dt.date | None = None,
    options: ReportOptions | None = None,
) -> Path:
    selection = _select(store, filters, options)
    f, filtered = selection.filters, selection.transactions
    view = LedgerView(view)
    today = today or dt.date.today()
    kpi = detailed_kpi(filtered)
    book = LedgerWorkbook()

    ws = book.sheet("Resumo")
    row = book.banner(
        ws, REPORT_TITLE,
        f"{REPORT_SUBTITLE}  |  Emitido por {(issuer or DEFAULT_ISSUER).upper()}"
        f"  |  {pd.Timestamp.now():%d/%m/%Y %H:%M}",
    )
    row = book.section(ws, row + 1, "ENTRADAS")
    row = book.cards(ws, row, [
        KpiCard(kpi.total_received, "ENTRADAS PREVISTAS"),
        KpiCard(kpi.settled_receivables, "JÁ RECEBIDO"),
        KpiCard(kpi.pending_receivables, "PENDENTE"),
    ])
    row = book.section(ws, row, "SAÍDAS")
    row = book.cards(ws, row, [
        KpiCard(kpi.total_paid, "SAÍDAS PREVISTAS"),
        KpiCard(kpi.settled_payables, "JÁ PAGO"),
        KpiCard(kpi.pending_payables, "A PAGAR"),
    ])
    row = book.section(ws, row, "SALDO")
    row = book.cards(ws, row, [
        KpiCard(kpi.balance, "SALDO PREVISTO", signed=True),
        KpiCard(len(filtered), "LANÇAMENTOS", fmt="number"),
    ])
    if not f.is_empty:
        book.pairs(ws, book.section(ws, row, "FILTROS"), f.active())

    ws = book.sheet("Transações")
    book.table(
        ws, view_columns(view), render_rows(filtered, view, today),
        tags=[_highlight(t, today) for t in filtered],
    )

    path = book.save(output_path)
    logger.info(f"Excel report: {len(filtered)} rows -> {path}")
    return path


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

PRIMARY = colors.HexColor("#1E40AF")
SECONDARY = colors.HexColor("#475569")
GREEN = colors.HexColor("#16A34A")
RED = colors.HexColor("#DC2626")
ORANGE = colors.HexColor("#EA580C")
STRIPE = colors.HexColor("#F5F7FA")
PANEL = colors.HexColor("#F8FAFC")
PANEL_BORDER = colors.HexColor("#E2E8F0")

HEADER_HEIGHT = 30 * mm
PAGE_MARGIN = 14 * mm

_CELL_STYLE = ParagraphStyle("cell", fontName="Helvetica", fontSize=7, leading=8.5, alignment=TA_LEFT)
_SECTION_STYLE = ParagraphStyle("section", fontName="Helvetica-Bold", fontSize=9,
                                textColor=colors.HexColor("#505050"), spaceAfter=4)
_SUMMARY_STYLE = ParagraphStyle("summary", fontName="Helvetica", fontSize=8, leading=11)


def pdf_filename(now: dt.datetime | None = None) -> str:
    now = now or dt.datetime.now()
    return f"Relatorio_Financeiro_{now:%Y-%m-%d}.pdf"


def _page_decorator(issuer: str, stamp: dt.datetime, client: str | None):
    def draw(canvas, doc):
        width, height = doc.pagesize
        canvas.saveState()

        canvas.setFillColor(PRIMARY)
        canvas.rect(0, height - HEADER_HEIGHT, width, HEADER_HEIGHT, stroke=0, fill=1)
        canvas.setFillColor(colors.white)
        canvas.setFont("Helvetica-Bold", 20)
        canvas.drawString(PAGE_MARGIN, height - 14 * mm, REPORT_TITLE)
        canvas.setFont("Helvetica", 10)
        canvas.drawString(PAGE_MARGIN, height - 20 * mm, REPORT_SUBTITLE)

        canvas.setFont("Helvetica-Bold", 9)
        canvas.drawRightString(width - PAGE_MARGIN, height - 14 * mm, f"EMITIDO POR: {issuer}")
        canvas.drawRightString(width - PAGE_MARGIN, height - 20 * mm,
                               f"DATA: {stamp:%d/%m/%Y} às {stamp:%H:%M:%S}")
        if client:
            canvas.setFont("Helvetica-Bold", 11)
            canvas.setFillColor(colors.yellow)
            canvas.drawString(PAGE_MARGIN, height - 26 * mm, f"CLIENTE / FAVORECIDO: {client.upper()}")

        canvas.setStrokeColor(colors.HexColor("#969696"))
        canvas.line(PAGE_MARGIN, 12 * mm, width - PAGE_MARGIN, 12 * mm)
        canvas.setFillColor(colors.HexColor("#969696"))
        canvas.setFont("Helvetica", 8)
        canvas.drawString(PAGE_MARGIN, 8 * mm, "SP Contábil - Relatório de Contas a Pagar/Receber")
        canvas.drawRightString(width - PAGE_MARGIN, 8 * mm, f"Página {canvas.getPageNumber()}")

        canvas.restoreState()

    return draw


def _summary_table(kpi, width: float) -> Table:
    def line(text, color, bold=False):
        tag = f"<b>{text}</b>" if bold else text
        return f'<font color="#{color.hexval()[2:]}">{tag}</font>'

    inflow = "<br/>".join([
        line(f"ENTRADAS PREVISTAS: {format_brl(kpi.total_received)}", GREEN, bold=True),
        line(f"- Já Recebido: {format_brl(kpi.settled_receivables)}", GREEN),
        line(f"- Pendente: {format_brl(kpi.pending_receivables)}", GREEN),
    ])
    outflow = "<br/>".join([
        line(f"SAÍDAS PREVISTAS: {format_brl(kpi.total_paid)}", RED, bold=True),
        line(f"- Já Pago: {format_brl(kpi.settled_payables)}", RED),
        line(f"- A PAGAR (PENDENTE): {format_brl(kpi.pending_payables)}", ORANGE, bold=True),
    ])
    balance = line(f"Saldo Previsto: {format_brl(kpi.balance)}",
                   PRIMARY if kpi.balance >= 0 else RED, bold=True)

    table = Table(
        [[Paragraph("<b>Resumo Financeiro:</b>", _SUMMARY_STYLE), "", ""],
         [Paragraph(inflow, _SUMMARY_STYLE), Paragraph(outflow, _SUMMARY_STYLE),
          Paragraph(balance, _SUMMARY_STYLE)]],
        colWidths=[width / 3] * 3,
    )
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), PANEL),
        ("BOX", (0, 0), (-1, -1), 0.75, PANEL_BORDER),
        ("SPAN", (0, 0), (-1, 0)),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    return table


_WRAPPED = {"description", "client", "tax_id"}


def _pdf_cell(key: str, value, col_type: str):
    if col_type == "date":
        return format_date_br(value)
    if col_type == "currency":
        return format_brl(value).replace("R$ ", "")
    if key not in _WRAPPED:
        return str(value or "")
    return Paragraph(escape(str(value or "")), _CELL_STYLE)


def _transactions_table(transactions: Sequence[Transaction], columns, width: float) -> Table:
    rows = report_rows(transactions, with_tax_id=any(key == "tax_id" for key, _, _ in columns))
    body = [[label for _, _, label in columns]]
    for row in rows:
        body.append([_pdf_cell(key, row[key], col_type) for key, col_type, _ in columns])

    fixed = {"date": 18 * mm, "due_date": 18 * mm, "payment_date": 18 * mm, "description": 38 * mm,
             "status": 18 * mm, "original_value": 26 * mm, "settled_value": 26 * mm, "tax_id": 28 * mm}
    flexible = max(width - sum(fixed.get(key, 0) for key, _, _ in columns), 30 * mm)
    col_widths = [fixed.get(key, flexible) for key, _, _ in columns]

    style = [
        ("BACKGROUND", (0, 0), (-1, 0), SECONDARY),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 8),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    if rows:
        style += [
            ("FONTSIZE", (0, 1), (-1, -1), 7),
            ("TEXTCOLOR", (0, 1), (-1, -1), colors.HexColor("#323232")),
            ("ALIGN", (0, 1), (2, -1), "CENTER"),
            ("ALIGN", (4, 1), (4, -1), "CENTER"),
            ("ALIGN", (5, 1), (6, -1), "RIGHT"),
            ("FONTNAME", (6, 1), (6, -1), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]),
        ]
    for i, t in enumerate(transactions, start=1):
        if t.status == Status.PAID:
            style.append(("TEXTCOLOR", (4, i), (4, i), GREEN))
        else:
            style.append(("TEXTCOLOR", (4, i), (5, i), ORANGE))
            style.append(("FONTNAME", (4, i), (5, i), "Helvetica-Bold"))

    table = Table(body, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle(style))
    return table


def generate_pdf(
    store: TransactionStore,
    filters: FilterState | Mapping[str, Any] | None = None,
    view: LedgerView = LedgerView.MIXED,
    issuer: str | None = None,
    now: dt.datetime | None = None,
    options: ReportOptions | None = None,
) -> bytes:
    """Landscape A4 report as PDF bytes.

    The receivable view and the receivables mode add the client tax id column; every page carries
    the header band (title, issuer, timestamp) and a numbered footer.
    """
    selection = _select(store, filters, options)
    f, filtered = selection.filters, selection.transactions
    view = LedgerView(view)
    now = now or dt.datetime.now()
    issuer = (issuer or DEFAULT_ISSUER).upper()

    columns = list(REPORT_COLS)
    if view == LedgerView.RECEIVABLE or selection.options.mode == ReportMode.RECEIVABLES:
        columns += RECEIVABLE_EXTRA_COLS

    buffer = io.BytesIO()
    pagesize = landscape(A4)
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=HEADER_HEIGHT + 6 * mm,
        bottomMargin=18 * mm,
        title=REPORT_TITLE,
        author=issuer,
    )
    width = pagesize[0] - 2 * PAGE_MARGIN

    story = [
        _summary_table(detailed_kpi(filtered), width),
        Spacer(1, 6 * mm),
        Paragraph(SECTION_TITLES[selection.options.mode], _SECTION_STYLE),
        _transactions_table(filtered, columns, width),
    ]
    decorate = _page_decorator(issuer, now, f.client)
    doc.build(story, onFirstPage=decorate, onLaterPages=decorate)

    logger.info(f"PDF report: {len(filtered)} rows, issued by {issuer}")
    return buffer.getvalue()


def write_pdf(
    store: TransactionStore,
    output_path: str | Path,
    filters: FilterState | Mapping[str, Any] | None = None,
    view: LedgerView = LedgerView.MIXED,
    issuer: str | None = None,
    options: ReportOptions | None = None,
) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(generate_pdf(store, filters, view, issuer, options=options))
    return path
