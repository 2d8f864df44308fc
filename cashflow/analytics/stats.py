"""
Cash-position statistics: global stats for the dashboard header and the
settled/pending breakdown used by reports.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from loguru import logger

from cashflow.config import REALIZED_STATUS_WORDS
from cashflow.data.schemas import (
    DetailedKPI, GlobalStats, Movement, Status, Transaction, ZERO,
)
from cashflow.data.store import TransactionStore


def is_inflow_like(t: Transaction) -> bool:
    return t.movement == Movement.INFLOW or (t.value_received > 0 and t.value_paid == 0)


def is_outflow_like(t: Transaction) -> bool:
    return t.movement == Movement.OUTFLOW or (t.value_paid > 0 and t.value_received == 0)


def expected_receivable(t: Transaction):
    """What an open receivable is worth: the billed total when present."""
    return t.total_billed if t.total_billed > 0 else t.value_received


def global_stats(transactions: Sequence[Transaction]) -> GlobalStats:
    """Open receivables, open payables, and realized cash balance of the whole ledger."""
    pending_receivables = ZERO
    pending_payables = ZERO
    cash_balance = ZERO

    for t in transactions:
        if t.status.value.lower() in REALIZED_STATUS_WORDS:
            cash_balance += t.value_received - t.value_paid
            continue
        if is_inflow_like(t):
            pending_receivables += expected_receivable(t)
        if is_outflow_like(t):
            pending_payables += t.value_paid

    return GlobalStats(
        pending_receivables=pending_receivables,
        pending_payables=pending_payables,
        cash_balance=cash_balance,
    )


def detailed_kpi(transactions: Sequence[Transaction]) -> DetailedKPI:
    """General KPI plus settled vs pending payables/receivables."""
    total_paid = total_received = ZERO
    settled_payables = pending_payables = ZERO
    settled_receivables = pending_receivables = ZERO

    for t in transactions:
        is_paid = t.status == Status.PAID
        is_pending = t.status in (Status.PENDING, Status.SCHEDULED)

        total_paid += t.value_paid
        total_received += t.value_received

        if t.movement == Movement.OUTFLOW or t.value_paid > 0:
            if is_paid:
                settled_payables += t.value_paid
            if is_pending:
                pending_payables += t.value_paid

        if t.movement == Movement.INFLOW or t.value_received > 0:
            if is_paid:
                settled_receivables += t.value_received
            if is_pending:
                pending_receivables += expected_receivable(t)

    return DetailedKPI(
        total_paid=total_paid,
        total_received=total_received,
        balance=total_received - total_paid,
        settled_payables=settled_payables,
        pending_payables=pending_payables,
        settled_receivables=settled_receivables,
        pending_receivables=pending_receivables,
    )


class GlobalStatsView:
    """Keeps GlobalStats current by listening to store changes.

    Replaces a fixed-interval poll: recomputation happens exactly when the
    store publishes a new snapshot (or is cleared).
    """

    def __init__(self, store: TransactionStore) -> None:
        self._stats = GlobalStats()
        self._callbacks: list[Callable[[GlobalStats], None]] = []
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(self._on_change)
        if store.is_loaded:
            self._on_change(store)

    @property
    def stats(self) -> GlobalStats:
        return self._stats

    def on_update(self, callback: Callable[[GlobalStats], None]) -> None:
        self._callbacks.append(callback)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, store: TransactionStore) -> None:
        self._stats = global_stats(store.transactions()) if store.is_loaded else GlobalStats()
        logger.debug(f"Global stats updated: {self._stats}")
        for cb in list(self._callbacks):
            cb(self._stats)
