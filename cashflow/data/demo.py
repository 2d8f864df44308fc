"""
Demo ledger: generated transactions for offline use and walkthroughs.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

import numpy as np
from loguru import logger

from cashflow.data.schemas import Movement, Status, Transaction, ZERO

BANK_ACCOUNTS = ["Itau", "Bradesco", "Santander", "Caixa", "Nubank", "Inter"]
TRANSACTION_TYPES = ["Serviço", "Produto", "Consultoria", "Impostos", "Aluguel", "Salários", "Fornecedores"]
STATUSES = [Status.PAID, Status.PENDING, Status.SCHEDULED]
CLIENTS = ["TechSolutions Ltda", "Mercado Silva", "João Souza", "Condomínio Solar", "Padaria Central", "Posto Shell"]
PAYERS = ["Financeiro", "Diretoria", "RH", "Automático"]


def generate_transactions(
    count: int,
    seed: int = 42,
    today: dt.date | None = None,
) -> list[Transaction]:
    """Roughly 60% inflows / 40% outflows over the last 90 days, newest first."""
    rng = np.random.default_rng(seed)
    today = today or dt.date.today()

    transactions = []
    for i in range(count):
        is_inflow = rng.random() > 0.4
        date = today - dt.timedelta(days=int(rng.integers(0, 90)))
        due_date = date + dt.timedelta(days=int(rng.integers(0, 10)))
        value = Decimal(int(rng.integers(100, 5100)))

        transactions.append(Transaction(
            id=f"trx-{i + 1}",
            date=date,
            due_date=due_date,
            bank_account=BANK_ACCOUNTS[rng.integers(len(BANK_ACCOUNTS))],
            type=TRANSACTION_TYPES[rng.integers(len(TRANSACTION_TYPES))],
            status=STATUSES[rng.integers(len(STATUSES))],
            client=CLIENTS[rng.integers(len(CLIENTS))],
            paid_by=PAYERS[rng.integers(len(PAYERS))],
            movement=Movement.INFLOW if is_inflow else Movement.OUTFLOW,
            value_paid=ZERO if is_inflow else value,
            value_received=value if is_inflow else ZERO,
        ))

    transactions.sort(key=lambda t: t.date, reverse=True)
    return transactions


class DemoSource:
    """Source that never touches the network."""

    def __init__(self, count: int = 150, seed: int = 42) -> None:
        self.count = count
        self.seed = seed

    def describe(self) -> str:
        return f"demo ledger ({self.count} rows, seed {self.seed})"

    def fetch(self) -> list[Transaction]:
        logger.warning("Using demo ledger data")
        return generate_transactions(self.count, self.seed)
