"""
Report selection: report mode presets, sort order, and the per-row values
shown in the report tables.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

from cashflow.analytics.ledger import apply_filters, coerce_filters
from cashflow.analytics.stats import is_inflow_like
from cashflow.data.schemas import FilterState, Movement, Status, Transaction, ZERO


class ReportMode(str, Enum):
    GENERAL = "general"
    PAYABLES = "payables"
    RECEIVABLES = "receivables"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def original_value(t: Transaction) -> Decimal:
    """Amount the line was opened for. Open receivables prefer the billed total."""
    if not is_inflow_like(t):
        return t.value_paid
    if t.status != Status.PAID and t.total_billed > 0:
        return t.total_billed
    return t.value_received if t.value_received > 0 else t.total_billed


def settled_value(t: Transaction) -> Decimal:
    """Amount already paid or received; zero while the line is open."""
    if t.status != Status.PAID:
        return ZERO
    return t.value_received if is_inflow_like(t) else t.value_paid


# Rows without a settlement date sort before any dated row
SORT_KEYS: dict[str, Callable[[Transaction], Any]] = {
    "date": lambda t: t.date,
    "due_date": lambda t: t.due_date,
    "payment_date": lambda t: t.payment_date or dt.date.min,
    "original_value": original_value,
    "settled_value": settled_value,
    "status": lambda t: t.status.value,
    "client": lambda t: t.client.lower(),
    "tax_id": lambda t: t.tax_id.lower(),
}

MODE_SORT = {
    ReportMode.GENERAL: ("date", SortDirection.DESC),
    ReportMode.PAYABLES: ("due_date", SortDirection.ASC),
    ReportMode.RECEIVABLES: ("due_date", SortDirection.ASC),
}

MODE_MOVEMENT = {
    ReportMode.PAYABLES: Movement.OUTFLOW,
    ReportMode.RECEIVABLES: Movement.INFLOW,
}


@dataclass(frozen=True)
class ReportOptions:
    """Mode plus an optional sort override; unset sort falls back to the mode's order."""
    mode: ReportMode = ReportMode.GENERAL
    sort_field: Optional[str] = None
    sort_direction: Optional[SortDirection] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ReportMode(self.mode))
        if self.sort_direction is not None:
            object.__setattr__(self, "sort_direction", SortDirection(self.sort_direction))
        if self.sort_field is not None and self.sort_field not in SORT_KEYS:
            raise ValueError(f"Unknown sort field: {self.sort_field!r} (expected one of {', '.join(SORT_KEYS)})")

    @property
    def order(self) -> tuple[str, SortDirection]:
        field, direction = MODE_SORT[self.mode]
        return self.sort_field or field, self.sort_direction or direction


@dataclass(frozen=True)
class ReportSelection:
    filters: FilterState
    options: ReportOptions
    transactions: list[Transaction]

    def describe(self) -> dict:
        field, direction = self.options.order
        return {"mode": self.options.mode, "sort_field": field, "sort_direction": direction}


def apply_mode(filters: FilterState, mode: ReportMode) -> FilterState:
    """Payables/receivables reports list open lines of one direction, ranged by due date.

    The issue-date range, when given, is applied to the due date instead.
    """
    mode = ReportMode(mode)
    if mode == ReportMode.GENERAL:
        return filters
    return replace(
        filters,
        movement=MODE_MOVEMENT[mode].value,
        status=Status.PENDING.value,
        start_date=None,
        end_date=None,
        due_date_start=filters.due_date_start or filters.start_date,
        due_date_end=filters.due_date_end or filters.end_date,
    )


def sort_transactions(
    transactions: Iterable[Transaction],
    field: str = "date",
    direction: SortDirection = SortDirection.ASC,
) -> list[Transaction]:
    """Stable sort: equal keys keep their incoming order in both directions."""
    if field not in SORT_KEYS:
        raise ValueError(f"Unknown sort field: {field!r}")
    return sorted(transactions, key=SORT_KEYS[field], reverse=SortDirection(direction) == SortDirection.DESC)


def select_transactions(
    transactions: Iterable[Transaction],
    filters: FilterState | Mapping[str, Any] | None = None,
    options: ReportOptions | None = None,
) -> ReportSelection:
    options = options or ReportOptions()
    f = apply_mode(coerce_filters(filters), options.mode)
    field, direction = options.order
    rows = sort_transactions(apply_filters(transactions, f), field, direction)
    return ReportSelection(filters=f, options=options, transactions=rows)
