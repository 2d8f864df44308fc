"""
Ledger query engine: filter, paginate, and total a transaction collection.

Pure functions over an immutable collection; the same arguments always give
the same result and the input is never modified.
"""
from __future__ import annotations

import math
from dataclasses import fields
from typing import Any, Iterable, Mapping, Sequence

from cashflow.config import DEFAULT_PAGE_SIZE
from cashflow.analytics.common import dsum
from cashflow.data.schemas import (
    FilterState, KPIData, PaginatedResult, QueryResult, Transaction,
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

_EXACT_FIELDS = ("bank_account", "type", "status", "movement", "paid_by")


def _field_text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "value"):
        return str(value.value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def search_text(txn: Transaction) -> str:
    """All field values of a record joined by spaces, lower-cased."""
    return " ".join(_field_text(getattr(txn, f.name)) for f in fields(txn)).lower()


def matches(txn: Transaction, f: FilterState) -> bool:
    """True when the transaction satisfies every predicate that is set in f."""
    if f.id and f.id.lower() not in txn.id.lower():
        return False

    if f.start_date and txn.date < f.start_date:
        return False
    if f.end_date and txn.date > f.end_date:
        return False

    if f.due_date_start and txn.due_date < f.due_date_start:
        return False
    if f.due_date_end and txn.due_date > f.due_date_end:
        return False

    # Payment and receipt ranges both look at the settlement date
    for lower, upper in ((f.payment_date_start, f.payment_date_end),
                         (f.receipt_date_start, f.receipt_date_end)):
        if lower and (txn.payment_date is None or txn.payment_date < lower):
            return False
        if upper and (txn.payment_date is None or txn.payment_date > upper):
            return False

    for name in _EXACT_FIELDS:
        wanted = getattr(f, name)
        if wanted and _field_text(getattr(txn, name)) != _field_text(wanted):
            return False

    if f.types and txn.type not in f.types:
        return False

    if f.client and f.client.lower() not in txn.client.lower():
        return False

    if f.search and f.search.lower() not in search_text(txn):
        return False

    return True


def apply_filters(
    transactions: Iterable[Transaction],
    filters: FilterState | Mapping[str, Any] | None = None,
) -> list[Transaction]:
    """Filtered copy of the collection, original order preserved."""
    f = coerce_filters(filters)
    if f.is_empty:
        return list(transactions)
    return [t for t in transactions if matches(t, f)]


def coerce_filters(filters: FilterState | Mapping[str, Any] | None) -> FilterState:
    if isinstance(filters, FilterState):
        return filters
    return FilterState.from_dict(filters)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def compute_kpi(transactions: Sequence[Transaction]) -> KPIData:
    """Paid, received and balance (received - paid) over the whole set."""
    paid = dsum(t.value_paid for t in transactions)
    received = dsum(t.value_received for t in transactions)
    return KPIData(total_paid=paid, total_received=received, balance=received - paid)


def paginate(items: Sequence[Transaction], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> PaginatedResult:
    """One page of items. Pages past the end are empty; totals stay correct."""
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1 (got {page_size})")
    page = max(int(page), 1)
    total = len(items)
    start = (page - 1) * page_size
    return PaginatedResult(
        data=list(items[start:start + page_size]),
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def query_transactions(
    transactions: Sequence[Transaction],
    filters: FilterState | Mapping[str, Any] | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> QueryResult:
    """Filter, then return the requested page plus KPIs of the full filtered set."""
    filtered = apply_filters(transactions, filters)
    return QueryResult(
        result=paginate(filtered, page, page_size),
        kpi=compute_kpi(filtered),
    )
