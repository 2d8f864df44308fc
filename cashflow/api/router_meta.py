"""
Meta endpoints: health, filter options, reload.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from cashflow.config import OPTION_FIELDS
from cashflow.data.store import TransactionStore
from cashflow.exceptions import SourceError
from cashflow.api.dependencies import get_store, get_store_or_empty
from cashflow.api.response_models import HealthResponse, OptionsResponse, ReloadResponse

router = APIRouter(prefix="/api", tags=["meta"])


def _iso(value):
    return value.isoformat() if value else None


@router.get("/health", response_model=HealthResponse)
def health(store: TransactionStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok" if store.is_loaded else "no_data",
        loaded=store.is_loaded,
        rows=store.row_count(),
        source=store.source.describe(),
        last_updated_at=_iso(store.last_updated_at),
        last_error=store.last_error,
    )


@router.get("/options", response_model=OptionsResponse)
def list_options(store: TransactionStore = Depends(get_store)):
    """Distinct values for each filter dropdown."""
    return OptionsResponse(
        options={name: store.unique_values(name) for name in OPTION_FIELDS},
        date_range=store.date_range(),
    )


@router.post("/reload", response_model=ReloadResponse)
def reload_data(store: TransactionStore = Depends(get_store_or_empty)):
    """Refetch the ledger now. Answers 502 when the source fails."""
    try:
        store.refresh()
    except SourceError as exc:
        raise HTTPException(502, str(exc))
    logger.info(f"Reload via API complete: {store.row_count():,} rows")
    return ReloadResponse(
        status="reloaded",
        rows=store.row_count(),
        last_updated_at=_iso(store.last_updated_at),
    )
