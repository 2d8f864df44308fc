"""
FastAPI dependencies: store/auth lookup on app.state, filter and view parsing.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request

from cashflow.analytics.stats import GlobalStatsView
from cashflow.analytics.table import LedgerView
from cashflow.auth.gate import AuthGate
from cashflow.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cashflow.data.schemas import FilterState
from cashflow.data.store import TransactionStore
from cashflow.reports.selection import ReportOptions


# ---------------------------------------------------------------------------
# Objects owned by the app (set during startup)
# ---------------------------------------------------------------------------

def get_store_or_empty(request: Request) -> TransactionStore:
    """The store even if it has no data (health/reload endpoints)."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(503, "Server not initialized yet")
    return store


def get_store(store: TransactionStore = Depends(get_store_or_empty)) -> TransactionStore:
    if not store.is_loaded:
        raise HTTPException(503, store.last_error or "Data not loaded yet")
    return store


def get_gate(request: Request) -> AuthGate:
    gate = getattr(request.app.state, "gate", None)
    if gate is None:
        raise HTTPException(503, "Server not initialized yet")
    return gate


def get_stats_view(request: Request) -> Optional[GlobalStatsView]:
    return getattr(request.app.state, "stats_view", None)


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------

def _parse_date(value: Optional[str], name: str) -> Optional[dt.date]:
    if not value:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise HTTPException(400, f"Invalid {name}: {value} (expected YYYY-MM-DD)")


def parse_filters(
    id_: Optional[str] = Query(None, alias="id", description="Transaction id substring"),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    due_date_start: Optional[str] = Query(None),
    due_date_end: Optional[str] = Query(None),
    payment_date_start: Optional[str] = Query(None),
    payment_date_end: Optional[str] = Query(None),
    receipt_date_start: Optional[str] = Query(None),
    receipt_date_end: Optional[str] = Query(None),
    bank_account: Optional[str] = Query(None),
    type_: Optional[str] = Query(None, alias="type"),
    types: Optional[list[str]] = Query(None, description="Repeatable; keeps rows of any listed type"),
    status: Optional[str] = Query(None),
    client: Optional[str] = Query(None, description="Case-insensitive substring"),
    paid_by: Optional[str] = Query(None),
    movement: Optional[str] = Query(None, description="Entrada|Saída"),
    search: Optional[str] = Query(None, description="Free text over all fields"),
) -> FilterState:
    """Parse filter query parameters into a FilterState. Empty values are ignored."""
    return FilterState(
        id=id_ or None,
        start_date=_parse_date(start_date, "start_date"),
        end_date=_parse_date(end_date, "end_date"),
        due_date_start=_parse_date(due_date_start, "due_date_start"),
        due_date_end=_parse_date(due_date_end, "due_date_end"),
        payment_date_start=_parse_date(payment_date_start, "payment_date_start"),
        payment_date_end=_parse_date(payment_date_end, "payment_date_end"),
        receipt_date_start=_parse_date(receipt_date_start, "receipt_date_start"),
        receipt_date_end=_parse_date(receipt_date_end, "receipt_date_end"),
        bank_account=bank_account or None,
        type=type_ or None,
        types=tuple(t for t in types or () if t),
        status=status or None,
        client=client or None,
        paid_by=paid_by or None,
        movement=movement or None,
        search=search or None,
    )


def parse_view(view: Optional[str] = Query(None, description="payable|receivable|mixed")) -> LedgerView:
    if not view:
        return LedgerView.MIXED
    try:
        return LedgerView(view.lower())
    except ValueError:
        raise HTTPException(400, f"Invalid view: {view}")


def parse_paging(
    page: int = Query(1, description="1-based; values below 1 are treated as 1"),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
) -> tuple[int, int]:
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise HTTPException(400, f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    return page, page_size


def parse_report_options(
    mode: Optional[str] = Query(None, description="general|payables|receivables"),
    sort_field: Optional[str] = Query(None, description="Defaults to the mode's order"),
    sort_direction: Optional[str] = Query(None, description="asc|desc"),
) -> ReportOptions:
    try:
        return ReportOptions(
            mode=(mode or "general").lower(),
            sort_field=sort_field or None,
            sort_direction=sort_direction.lower() if sort_direction else None,
        )
    except ValueError as exc:
        raise HTTPException(400, f"Invalid report options: {exc}")
