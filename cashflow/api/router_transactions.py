"""
Ledger endpoints: filtered/paginated transactions with KPIs, global stats.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from cashflow.analytics.common import sanitize_for_json
from cashflow.analytics.ledger import apply_filters, query_transactions
from cashflow.analytics.stats import GlobalStatsView, global_stats
from cashflow.analytics.table import LedgerView, render_rows, view_columns, view_summary
from cashflow.data.schemas import FilterState
from cashflow.data.store import TransactionStore
from cashflow.api.dependencies import (
    get_stats_view, get_store, parse_filters, parse_paging, parse_view,
)
from cashflow.api.response_models import GlobalStatsResponse

router = APIRouter(prefix="/api", tags=["ledger"])


def _safe_json(data: dict) -> JSONResponse:
    return JSONResponse(content=sanitize_for_json(data))


@router.get("/transactions")
def list_transactions(
    store: TransactionStore = Depends(get_store),
    filters: FilterState = Depends(parse_filters),
    paging: tuple[int, int] = Depends(parse_paging),
    view: LedgerView = Depends(parse_view),
):
    """One page of the filtered ledger, KPIs of the whole filtered set, and the
    rows rendered for the requested table view."""
    page, page_size = paging
    filtered = apply_filters(store.transactions(), filters)
    try:
        q = query_transactions(filtered, None, page, page_size)
    except ValueError as exc:
        raise HTTPException(400, str(exc))

    return _safe_json({
        "result": q.result,
        "kpi": q.kpi,
        "view": view,
        "columns": [{"key": k, "type": t, "label": label} for k, t, label in view_columns(view)],
        "rows": render_rows(q.result.data, view),
        "view_summary": view_summary(filtered, view),
        "filters": filters.active(),
    })


@router.get("/stats/global", response_model=GlobalStatsResponse)
def get_global_stats(
    store: TransactionStore = Depends(get_store),
    stats_view: Optional[GlobalStatsView] = Depends(get_stats_view),
):
    """Whole-ledger cash position; kept current by the store subscription when available."""
    stats = stats_view.stats if stats_view is not None else global_stats(store.transactions())
    return GlobalStatsResponse(**sanitize_for_json(stats))
