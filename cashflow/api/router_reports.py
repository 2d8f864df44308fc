"""
Report endpoints: JSON summary and CSV / Excel / PDF downloads of the filtered ledger.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, Response

from cashflow.analytics.table import LedgerView
from cashflow.config import REPORTS_FOLDER
from cashflow.data.schemas import FilterState
from cashflow.data.store import TransactionStore
from cashflow.reports import csv_export, ledger_report
from cashflow.reports.selection import ReportOptions, select_transactions
from cashflow.api.dependencies import get_store, parse_filters, parse_report_options, parse_view
from cashflow.api.response_models import ReportResponse

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/summary", response_model=ReportResponse)
def report_summary(
    store: TransactionStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
    view: LedgerView = Depends(parse_view),
    options: ReportOptions = Depends(parse_report_options),
):
    return ReportResponse(data=ledger_report.generate_json(store, filters, view, options))


@router.get("/csv")
def report_csv(
    store: TransactionStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
    options: ReportOptions = Depends(parse_report_options),
):
    """Semicolon-delimited export of every selected row (no pagination), in report order."""
    filtered = select_transactions(store.transactions(), filters, options).transactions
    filename = csv_export.export_filename()
    return Response(
        content=csv_export.export_csv(filtered),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/excel")
def report_excel(
    store: TransactionStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
    view: LedgerView = Depends(parse_view),
    options: ReportOptions = Depends(parse_report_options),
    issuer: Optional[str] = Query(None, description="Name printed as the report issuer"),
):
    out_path = REPORTS_FOLDER / f"Relatorio_Financeiro_{dt.datetime.now():%Y%m%dT%H%M%S}.xlsx"
    ledger_report.generate_excel(store, out_path, filters, view, issuer, options=options)
    return FileResponse(
        path=str(out_path),
        filename=out_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


@router.get("/pdf")
def report_pdf(
    store: TransactionStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
    view: LedgerView = Depends(parse_view),
    options: ReportOptions = Depends(parse_report_options),
    issuer: Optional[str] = Query(None, description="Name printed as the report issuer"),
):
    content = ledger_report.generate_pdf(store, filters, view, issuer, options=options)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{ledger_report.pdf_filename()}"'},
    )
