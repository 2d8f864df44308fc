"""
Ledger record, filter and result schemas.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, fields, asdict
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

SENTINEL_DATE = dt.date(1970, 1, 1)

ZERO = Decimal("0")


class Status(str, Enum):
    PAID = "Pago"
    PENDING = "Pendente"
    SCHEDULED = "Agendado"


class Movement(str, Enum):
    INFLOW = "Entrada"
    OUTFLOW = "Saída"


@dataclass(frozen=True)
class Transaction:
    """One normalized ledger line. Built once at load time, never mutated."""
    id: str
    date: dt.date
    due_date: dt.date
    bank_account: str
    type: str
    status: Status
    client: str
    paid_by: str
    movement: Movement
    value_paid: Decimal = ZERO
    value_received: Decimal = ZERO
    payment_date: Optional[dt.date] = None
    description: str = ""
    fees: Decimal = ZERO             # honorários
    extra_value: Decimal = ZERO
    total_billed: Decimal = ZERO     # total cobrança
    tax_id: str = ""                 # CPF / CNPJ

    @property
    def is_paid(self) -> bool:
        return self.status == Status.PAID

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        d["movement"] = self.movement.value
        return d


# Fields that take a date value in FilterState
_DATE_FILTERS = {
    "start_date", "end_date",
    "due_date_start", "due_date_end",
    "payment_date_start", "payment_date_end",
    "receipt_date_start", "receipt_date_end",
}


@dataclass
class FilterState:
    """Optional predicates over the ledger. Unset (None, "" or empty) fields are ignored.

    `types` keeps rows whose type is any of the listed labels.
    """
    id: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    due_date_start: Optional[dt.date] = None
    due_date_end: Optional[dt.date] = None
    payment_date_start: Optional[dt.date] = None
    payment_date_end: Optional[dt.date] = None
    receipt_date_start: Optional[dt.date] = None
    receipt_date_end: Optional[dt.date] = None
    bank_account: Optional[str] = None
    type: Optional[str] = None
    types: tuple[str, ...] = ()
    status: Optional[str] = None
    client: Optional[str] = None
    paid_by: Optional[str] = None
    movement: Optional[str] = None
    search: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "FilterState":
        """Build from a partial mapping. ISO date strings are parsed; unknown keys raise."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown filter field(s): {sorted(unknown)}")
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if value is None or value == "":
                continue
            if key == "types":
                value = (value,) if isinstance(value, str) else tuple(v for v in value if v)
                if not value:
                    continue
            elif key in _DATE_FILTERS and isinstance(value, str):
                value = dt.date.fromisoformat(value[:10])
            elif isinstance(value, Enum):
                value = value.value
            kwargs[key] = value
        return cls(**kwargs)

    def active(self) -> dict[str, Any]:
        """Only the fields that are set."""
        return {f.name: getattr(self, f.name) for f in fields(self)
                if getattr(self, f.name) not in (None, "", ())}

    @property
    def is_empty(self) -> bool:
        return not self.active()


@dataclass(frozen=True)
class KPIData:
    total_paid: Decimal = ZERO
    total_received: Decimal = ZERO
    balance: Decimal = ZERO


@dataclass(frozen=True)
class DetailedKPI:
    """KPI plus the settled/pending split shown on the reports page."""
    total_paid: Decimal = ZERO
    total_received: Decimal = ZERO
    balance: Decimal = ZERO
    settled_payables: Decimal = ZERO
    pending_payables: Decimal = ZERO
    settled_receivables: Decimal = ZERO
    pending_receivables: Decimal = ZERO


@dataclass(frozen=True)
class GlobalStats:
    """Whole-ledger cash position (dashboard header cards)."""
    pending_receivables: Decimal = ZERO
    pending_payables: Decimal = ZERO
    cash_balance: Decimal = ZERO


@dataclass(frozen=True)
class PaginatedResult:
    data: list[Transaction] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0


@dataclass(frozen=True)
class QueryResult:
    result: PaginatedResult
    kpi: KPIData
