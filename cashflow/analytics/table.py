"""
Ledger table presentation: view variants, per-row derived fields, column layouts.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from cashflow.analytics.common import dsum
from cashflow.analytics.ledger import compute_kpi
from cashflow.data.normalize import is_sentinel
from cashflow.data.schemas import KPIData, Status, Transaction, ZERO


class LedgerView(str, Enum):
    """Which table layout a consumer shows. Picked by the caller, never guessed from text."""
    PAYABLE = "payable"
    RECEIVABLE = "receivable"
    MIXED = "mixed"


ColSpec = tuple[str, str, str]  # (key, col_type, label)

_COLUMNS: dict[LedgerView, list[ColSpec]] = {
    LedgerView.PAYABLE: [
        ("id", "text", "ID"),
        ("due_date", "date", "Vencimento"),
        ("client", "text", "Credor"),
        ("type", "text", "Tipo"),
        ("bank_account", "text", "Conta"),
        ("value_paid", "currency", "Valor"),
        ("status", "text", "Status"),
        ("overdue_days", "number", "Dias em Atraso"),
    ],
    LedgerView.RECEIVABLE: [
        ("id", "text", "ID"),
        ("date", "date", "Lançamento"),
        ("due_date", "date", "Vencimento"),
        ("payment_date", "date", "Recebimento"),
        ("client", "text", "Cliente"),
        ("tax_id", "text", "CPF / CNPJ"),
        ("fees", "currency", "Honorários"),
        ("extra_value", "currency", "Extras"),
        ("total_billed", "currency", "Total Cobrança"),
        ("value_received", "currency", "Valor Recebido"),
        ("remaining_balance", "currency", "Saldo Restante"),
        ("overdue_days", "number", "Dias em Atraso"),
    ],
    LedgerView.MIXED: [
        ("id", "text", "ID"),
        ("date", "date", "Data"),
        ("client", "text", "Cliente / Credor"),
        ("movement", "text", "Movimento"),
        ("status", "text", "Status"),
        ("amount", "currency", "Valor"),
    ],
}


def view_columns(view: LedgerView) -> list[ColSpec]:
    return list(_COLUMNS[LedgerView(view)])


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------

def overdue_days(txn: Transaction, today: dt.date | None = None) -> int:
    """Whole days past due for an unpaid transaction; 0 otherwise."""
    if txn.status == Status.PAID:
        return 0
    if is_sentinel(txn.due_date):
        return 0
    today = today or dt.date.today()
    if txn.due_date >= today:
        return 0
    return (today - txn.due_date).days


def remaining_balance(txn: Transaction) -> Decimal:
    """Billed total still to be received, never negative."""
    remaining = txn.total_billed - txn.value_received
    return remaining if remaining > 0 else ZERO


def render_row(txn: Transaction, view: LedgerView, today: dt.date | None = None) -> dict:
    derived = {
        "overdue_days": overdue_days(txn, today),
        "remaining_balance": remaining_balance(txn),
        "amount": txn.value_received if txn.value_received > 0 else txn.value_paid,
    }
    row = {}
    for key, _, _ in _COLUMNS[LedgerView(view)]:
        value = derived[key] if key in derived else getattr(txn, key)
        row[key] = value.value if isinstance(value, Enum) else value
    return row


def render_rows(
    transactions: Iterable[Transaction],
    view: LedgerView = LedgerView.MIXED,
    today: dt.date | None = None,
) -> list[dict]:
    today = today or dt.date.today()
    return [render_row(t, view, today) for t in transactions]


# ---------------------------------------------------------------------------
# View-specific totals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ViewSummary:
    total: Decimal = ZERO
    settled: Decimal = ZERO
    pending: Decimal = ZERO


def view_summary(transactions: Sequence[Transaction], view: LedgerView) -> ViewSummary | KPIData:
    """Totals that make sense for the chosen layout.

    payable:    expected outflow / already paid / still to pay
    receivable: billed (or received) / already received / still to receive
    mixed:      the general KPI (paid, received, balance)
    """
    view = LedgerView(view)
    if view == LedgerView.PAYABLE:
        total = dsum(t.value_paid for t in transactions)
        settled = dsum(t.value_paid for t in transactions if t.status == Status.PAID)
        return ViewSummary(total=total, settled=settled, pending=total - settled)
    if view == LedgerView.RECEIVABLE:
        total = dsum(t.total_billed if t.total_billed else t.value_received for t in transactions)
        settled = dsum(t.value_received for t in transactions if t.status == Status.PAID)
        return ViewSummary(total=total, settled=settled, pending=total - settled)
    return compute_kpi(transactions)
