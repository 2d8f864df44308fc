import datetime as dt
from decimal import Decimal

import pytest
import requests

from cashflow.config import PAYABLE_TYPE_LABEL, RECEIVABLE_TYPE_LABEL, SPREADSHEET_GID, SPREADSHEET_ID
import cashflow.data.loader as loader
from cashflow.data.loader import (
    CsvFileSource, SpreadsheetSource, build_source, parse_ledger_csv, parse_spreadsheet_reference,
)
from cashflow.data.demo import DemoSource
from cashflow.data.store import TransactionStore
from cashflow.data.schemas import Movement, Status
from cashflow.exceptions import SourceError

HEADER = [
    "Submission", "Data Lançamento", "Contas Bancárias", "Tipo de Lançamento", "Pago Por",
    "Movimentação", "Vencimento", "Doc.Pago", "Data Baixa", "Valor Ref", "Valor Pago",
    "Nome Empresa", "CPF/CNPJ", "Honorários", "Extras", "Total Cobrança", "Valor Recebido",
    "Doc.Pago - Receber", "Valor Original Recorrente",
]


def _line(**cells) -> str:
    row = [""] * len(HEADER)
    for name, value in cells.items():
        row[HEADER.index(name)] = value
    return ",".join(f'"{c}"' if "," in c else c for c in row)


def _csv(*data_lines: str) -> str:
    preamble = ",".join(["Controle Financeiro"] + [""] * (len(HEADER) - 1))
    return "\n".join([preamble, ",".join(HEADER), *data_lines]) + "\n"


PAYABLE_PAID = _line(**{
    "Submission": "1", "Data Lançamento": "10/05/2024", "Contas Bancárias": "Itau",
    "Tipo de Lançamento": "Saída de Caixa / Contas a Pagar", "Pago Por": "Financeiro",
    "Movimentação": "Aluguel maio", "Vencimento": "15/05/2024", "Doc.Pago": "SIM",
    "Data Baixa": "14/05/2024", "Valor Pago": "R$ 1.500,00", "Nome Empresa": "Imobiliária Sol",
})
PAYABLE_OPEN = _line(**{
    "Submission": "2", "Data Lançamento": "12/05/2024", "Contas Bancárias": "Bradesco",
    "Tipo de Lançamento": "Saida de caixa - contas a pagar", "Movimentação": "Energia",
    "Valor Ref": "R$ 320,40", "Nome Empresa": "Companhia de Luz",
})
RECEIVABLE_FLAGGED = _line(**{
    "Submission": "3", "Data Lançamento": "01/05/2024", "Contas Bancárias": "Itau",
    "Tipo de Lançamento": "Entrada de Caixa / Contas a Receber", "Movimentação": "Honorários",
    "Nome Empresa": "TechSolutions Ltda", "CPF/CNPJ": "12.345.678/0001-90",
    "Honorários": "R$ 900,00", "Extras": "R$ 100,00", "Total Cobrança": "R$ 1.000,00",
    "Doc.Pago - Receber": "SIM",
})
RECEIVABLE_OPEN = _line(**{
    "Submission": "4", "Data Lançamento": "20/05/2024",
    "Tipo de Lançamento": "Entrada de Caixa / Contas a Receber",
    "Nome Empresa": "Mercado Silva", "Total Cobrança": "R$ 450,00", "Vencimento": "05/06/2024",
})
BAD_DATE = _line(**{
    "Submission": "5", "Data Lançamento": "sem data",
    "Tipo de Lançamento": "Entrada de Caixa / Contas a Receber",
    "Nome Empresa": "Cliente X", "Valor Recebido": "50",
})


@pytest.fixture
def parsed():
    text = _csv(PAYABLE_PAID, PAYABLE_OPEN, RECEIVABLE_FLAGGED, RECEIVABLE_OPEN, BAD_DATE)
    return {t.client: t for t in parse_ledger_csv(text)}


def test_parses_every_data_row(parsed):
    assert len(parsed) == 5


def test_sorted_by_date_descending():
    text = _csv(PAYABLE_PAID, PAYABLE_OPEN, RECEIVABLE_FLAGGED, RECEIVABLE_OPEN, BAD_DATE)
    dates = [t.date for t in parse_ledger_csv(text)]
    assert dates == sorted(dates, reverse=True)
    assert dates[-1] == dt.date(1970, 1, 1)


def test_ids_follow_sheet_order(parsed):
    assert parsed["Imobiliária Sol"].id == "trx-0"
    assert parsed["Cliente X"].id == "trx-4"


def test_paid_payable(parsed):
    t = parsed["Imobiliária Sol"]
    assert t.movement == Movement.OUTFLOW
    assert t.type == PAYABLE_TYPE_LABEL
    assert t.status == Status.PAID
    assert t.value_paid == Decimal("1500.00")
    assert t.value_received == Decimal("0")
    assert t.date == dt.date(2024, 5, 10)
    assert t.due_date == dt.date(2024, 5, 15)
    assert t.payment_date == dt.date(2024, 5, 14)
    assert t.description == "Aluguel maio"
    assert t.paid_by == "Financeiro"


def test_open_payable_uses_reference_value_and_issue_date_as_due(parsed):
    t = parsed["Companhia de Luz"]
    assert t.type == PAYABLE_TYPE_LABEL
    assert t.status == Status.PENDING
    assert t.value_paid == Decimal("320.40")
    assert t.due_date == t.date == dt.date(2024, 5, 12)
    assert t.payment_date is None


def test_receivable_flagged_paid_takes_billed_total(parsed):
    t = parsed["TechSolutions Ltda"]
    assert t.type == RECEIVABLE_TYPE_LABEL
    assert t.movement == Movement.INFLOW
    assert t.status == Status.PAID
    assert t.value_received == Decimal("1000.00")
    assert t.fees == Decimal("900.00")
    assert t.extra_value == Decimal("100.00")
    assert t.total_billed == Decimal("1000.00")
    assert t.tax_id == "12.345.678/0001-90"


def test_open_receivable(parsed):
    t = parsed["Mercado Silva"]
    assert t.status == Status.PENDING
    assert t.value_received == Decimal("0")
    assert t.total_billed == Decimal("450.00")
    assert t.due_date == dt.date(2024, 6, 5)


def test_received_value_marks_inflow_paid(parsed):
    t = parsed["Cliente X"]
    assert t.status == Status.PAID
    assert t.value_received == Decimal("50")
    assert t.date == dt.date(1970, 1, 1)


def test_bom_and_empty_input():
    assert parse_ledger_csv("") == []
    assert parse_ledger_csv("\ufeff") == []
    assert len(parse_ledger_csv("\ufeff" + _csv(PAYABLE_PAID))) == 1


def test_parse_spreadsheet_reference():
    url = "https://docs.google.com/spreadsheets/d/abc-123_XY/edit#gid=42"
    assert parse_spreadsheet_reference(url) == ("abc-123_XY", "42")
    assert parse_spreadsheet_reference("otherSheet") == ("otherSheet", "0")
    assert parse_spreadsheet_reference(SPREADSHEET_ID) == (SPREADSHEET_ID, SPREADSHEET_GID)


class _Response:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code
        self.ok = status_code < 400
        self.encoding = "utf-8"


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def test_spreadsheet_source_fetches_export_url():
    session = _Session(_Response(_csv(PAYABLE_PAID, RECEIVABLE_OPEN)))
    source = SpreadsheetSource("sheet1", "7", session=session)
    transactions = source.fetch()
    assert len(transactions) == 2
    assert session.urls == ["https://docs.google.com/spreadsheets/d/sheet1/export?format=csv&gid=7"]


def test_spreadsheet_source_private_sheet():
    session = _Session(_Response("<!DOCTYPE html><html><body>Sign in</body></html>"))
    with pytest.raises(SourceError, match="private"):
        SpreadsheetSource("sheet1", "0", session=session).fetch()


def test_spreadsheet_source_http_error():
    session = _Session(_Response("nope", status_code=404))
    with pytest.raises(SourceError, match="404"):
        SpreadsheetSource("sheet1", "0", session=session).fetch()


def test_spreadsheet_source_network_error():
    session = _Session(error=requests.ConnectionError("connection refused"))
    with pytest.raises(SourceError, match="Could not reach"):
        SpreadsheetSource("sheet1", "0", session=session).fetch()


def test_csv_file_source(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("\ufeff" + _csv(PAYABLE_PAID, PAYABLE_OPEN), encoding="utf-8")
    assert len(CsvFileSource(path).fetch()) == 2


def test_csv_file_source_missing_file(tmp_path):
    with pytest.raises(SourceError):
        CsvFileSource(tmp_path / "missing.csv").fetch()


def test_build_source():
    assert isinstance(build_source("demo"), DemoSource)
    assert isinstance(build_source("csv"), CsvFileSource)
    with pytest.raises(ValueError):
        build_source("ftp")


def test_title_row_narrower_than_header():
    text = "\n".join(["Fluxo de Caixa 2024", ",".join(HEADER), PAYABLE_PAID, RECEIVABLE_OPEN]) + "\n"
    transactions = parse_ledger_csv(text)
    assert {t.client for t in transactions} == {"Imobiliária Sol", "Mercado Silva"}
    assert {t.id for t in transactions} == {"trx-0", "trx-1"}


def test_rows_wider_than_header_are_kept():
    text = "\n".join([",".join(HEADER), PAYABLE_PAID + ",nota extra,outra", RECEIVABLE_OPEN]) + "\n"
    assert len(parse_ledger_csv(text)) == 2


def test_csv_file_source_latin1(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_bytes(_csv(PAYABLE_PAID, RECEIVABLE_FLAGGED).encode("latin-1"))
    transactions = CsvFileSource(path).fetch()
    assert {t.client for t in transactions} == {"Imobiliária Sol", "TechSolutions Ltda"}
    assert {t.type for t in transactions} == {PAYABLE_TYPE_LABEL, RECEIVABLE_TYPE_LABEL}


def test_store_refresh_after_file_reencoded(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text(_csv(PAYABLE_PAID), encoding="utf-8")
    store = TransactionStore(CsvFileSource(path)).load()
    path.write_bytes(_csv(PAYABLE_PAID, PAYABLE_OPEN).encode("latin-1"))
    store.refresh()
    assert store.is_loaded
    assert store.row_count() == 2


def test_build_source_accepts_sheet_url():
    source = build_source("spreadsheet", "https://docs.google.com/spreadsheets/d/abc-123/edit#gid=9")
    assert isinstance(source, SpreadsheetSource)
    assert source.url == "https://docs.google.com/spreadsheets/d/abc-123/export?format=csv&gid=9"


def test_build_source_default_reference(monkeypatch):
    default = build_source("spreadsheet")
    assert (default.spreadsheet_id, default.gid) == (SPREADSHEET_ID, SPREADSHEET_GID)

    monkeypatch.setattr(loader, "SPREADSHEET_ID", "https://docs.google.com/spreadsheets/d/fromEnv/edit?gid=5")
    source = build_source("spreadsheet")
    assert (source.spreadsheet_id, source.gid) == ("fromEnv", "5")
