import datetime as dt
from decimal import Decimal

import pytest

from cashflow.auth.gate import hash_password
from cashflow.auth.users import UserDirectory
from cashflow.data.schemas import Movement, Status, Transaction
from cashflow.data.store import TransactionStore
from cashflow.exceptions import SourceError

TODAY = dt.date(2024, 6, 30)


def make_txn(i: int = 0, **overrides) -> Transaction:
    values = dict(
        id=f"trx-{i}",
        date=TODAY - dt.timedelta(days=i),
        due_date=TODAY - dt.timedelta(days=i) + dt.timedelta(days=5),
        bank_account="Itau",
        type="Serviço",
        status=Status.PENDING,
        client="Mercado Silva",
        paid_by="Financeiro",
        movement=Movement.INFLOW,
    )
    values.update(overrides)
    return Transaction(**values)


class FakeSource:
    """Returns queued results in order; an Exception instance is raised instead."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def describe(self) -> str:
        return "fake source"

    def fetch(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def ledger() -> list[Transaction]:
    """25 rows: the first 10 are Pago outflows with cent values that drift as floats."""
    rows = []
    for i in range(25):
        if i < 10:
            rows.append(make_txn(
                i,
                status=Status.PAID,
                movement=Movement.OUTFLOW,
                value_paid=Decimal("0.10") + Decimal(i) / 100,
                client="Fornecedor Alfa" if i % 2 else "Posto Shell",
                bank_account="Bradesco",
                payment_date=TODAY - dt.timedelta(days=i),
            ))
        else:
            rows.append(make_txn(
                i,
                status=Status.SCHEDULED if i % 3 == 0 else Status.PENDING,
                value_received=Decimal("100.50") * (i - 9),
                total_billed=Decimal("120.00") * (i - 9),
                client="TechSolutions Ltda" if i % 2 else "Mercado Silva",
                tax_id="12.345.678/0001-90" if i % 2 else "",
            ))
    return rows


@pytest.fixture
def store(ledger) -> TransactionStore:
    return TransactionStore(FakeSource(ledger)).load()


@pytest.fixture
def failing_store() -> TransactionStore:
    return TransactionStore(FakeSource(SourceError("HTTP error 500 fetching the spreadsheet")))


@pytest.fixture
def users() -> UserDirectory:
    return UserDirectory.from_records([
        {"id": "1", "username": "admin", "name": "Administrador", "role": "admin",
         "active": True, "password_hash": hash_password("admin")},
        {"id": "2", "username": "operador1", "name": "Operador Um", "role": "operacional",
         "active": True, "password_hash": hash_password("senha1")},
        {"id": "3", "username": "antigo", "name": "Ex Operador", "role": "operacional",
         "active": False, "password_hash": hash_password("velha")},
    ])
