import datetime as dt
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from cashflow.analytics.table import LedgerView
from cashflow.data.schemas import SENTINEL_DATE, Movement, Status
from cashflow.exceptions import DataNotLoadedError
from cashflow.data.schemas import FilterState
from cashflow.reports import (
    ReportMode, ReportOptions, SortDirection, apply_mode, export_csv, export_filename, generate_excel,
    generate_json, generate_pdf, original_value, pdf_filename, select_transactions, settled_value,
    sort_transactions, write_csv, write_pdf,
)

from conftest import TODAY, make_txn

CSV_HEADER = "ID;Date;Bank Account;Type;Status;Client;Paid By;Movement;Value Paid;Value Received"


def test_export_filename():
    assert export_filename(dt.datetime(2024, 1, 2, 3, 4, 5)) == "export_20240102T030405.csv"
    assert pdf_filename(dt.datetime(2024, 1, 2, 3, 4, 5)) == "Relatorio_Financeiro_2024-01-02.pdf"


def test_export_csv_layout(ledger):
    lines = export_csv(ledger[:2]).splitlines()
    assert lines[0] == CSV_HEADER
    assert lines[1] == "trx-0;2024-06-30;Bradesco;Serviço;Pago;Posto Shell;Financeiro;Saída;0,10;0,00"
    assert len(lines) == 3


def test_export_csv_blank_sentinel_date():
    lines = export_csv([make_txn(date=SENTINEL_DATE, value_received=Decimal("1234.5"))]).splitlines()
    assert lines[1].split(";")[1] == ""
    assert lines[1].endswith(";1234,50")


def test_export_csv_empty():
    assert export_csv([]).splitlines() == [CSV_HEADER]


def test_write_csv(tmp_path, ledger):
    path = write_csv(ledger, tmp_path / "out", now=dt.datetime(2024, 6, 30, 12, 0, 0))
    assert path.name == "export_20240630T120000.csv"
    assert len(path.read_text(encoding="utf-8").splitlines()) == 26


def test_original_and_settled_values():
    paid_out = make_txn(status=Status.PAID, movement=Movement.OUTFLOW, value_paid=Decimal("30"))
    assert original_value(paid_out) == Decimal("30")
    assert settled_value(paid_out) == Decimal("30")

    open_in = make_txn(value_received=Decimal("80"), total_billed=Decimal("100"))
    assert original_value(open_in) == Decimal("100")
    assert settled_value(open_in) == Decimal("0")

    paid_in = make_txn(status=Status.PAID, value_received=Decimal("95"), total_billed=Decimal("100"))
    assert original_value(paid_in) == Decimal("95")
    assert settled_value(paid_in) == Decimal("95")


def test_generate_json(store):
    report = generate_json(store, {"status": "Pago"}, LedgerView.PAYABLE)
    assert report["count"] == 10
    assert report["view"] == "payable"
    assert report["filters"] == {"status": "Pago"}
    assert report["kpi"]["total_paid"] == pytest.approx(1.45)
    assert report["view_summary"]["settled"] == pytest.approx(1.45)
    assert report["date_range"] == "2024-06-21 to 2024-06-30"


def test_generate_json_no_match(store):
    report = generate_json(store, {"client": "nobody"})
    assert report["count"] == 0
    assert report["date_range"] == "N/A"


def test_reports_require_loaded_store(failing_store):
    with pytest.raises(DataNotLoadedError):
        generate_json(failing_store)


def test_generate_excel(tmp_path, store):
    path = generate_excel(
        store, tmp_path / "ledger.xlsx", {"movement": "Entrada"},
        view=LedgerView.RECEIVABLE, issuer="maria", today=TODAY,
    )
    wb = load_workbook(path)
    assert wb.sheetnames == ["Resumo", "Transações"]

    summary = wb["Resumo"]
    assert "MARIA" in summary["A2"].value

    ws = wb["Transações"]
    assert ws.cell(row=1, column=1).value == "ID"
    assert ws.cell(row=1, column=9).value == "Total Cobrança"
    assert ws.max_row == 17
    assert ws.cell(row=17, column=1).value == "TOTAL"
    assert ws.cell(row=17, column=9).value == pytest.approx(14400.0)
    assert ws.freeze_panes == "A2"


def test_generate_excel_empty_selection(tmp_path, store):
    path = generate_excel(store, tmp_path / "empty.xlsx", {"client": "nobody"}, today=TODAY)
    ws = load_workbook(path)["Transações"]
    assert ws.max_row == 1


@pytest.mark.parametrize("filters, view", [
    ({}, LedgerView.MIXED),
    ({"client": "silva"}, LedgerView.RECEIVABLE),
    ({"client": "nobody"}, LedgerView.PAYABLE),
])
def test_generate_pdf(store, filters, view):
    data = generate_pdf(store, filters, view, issuer="ana", now=dt.datetime(2024, 6, 30, 9, 0))
    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_write_pdf(tmp_path, store):
    path = write_pdf(store, tmp_path / "pdf" / "report.pdf", {"status": "Pendente"})
    assert path.read_bytes().startswith(b"%PDF")


# ---------------------------------------------------------------------------
# Report modes and ordering
# ---------------------------------------------------------------------------

def test_general_mode_sorts_by_date_descending(ledger):
    selection = select_transactions(list(reversed(ledger)))
    assert [t.id for t in selection.transactions][:3] == ["trx-0", "trx-1", "trx-2"]
    assert selection.describe() == {"mode": ReportMode.GENERAL, "sort_field": "date",
                                    "sort_direction": SortDirection.DESC}


def test_receivables_mode_lists_pending_inflows_by_due_date(ledger):
    selection = select_transactions(ledger, options=ReportOptions(mode="receivables"))
    ids = [t.id for t in selection.transactions]
    assert ids == ["trx-23", "trx-22", "trx-20", "trx-19", "trx-17",
                   "trx-16", "trx-14", "trx-13", "trx-11", "trx-10"]
    assert selection.filters.movement == "Entrada"
    assert selection.filters.status == "Pendente"


def test_payables_mode_excludes_settled_lines(ledger):
    assert select_transactions(ledger, options=ReportOptions(mode=ReportMode.PAYABLES)).transactions == []

    open_bill = make_txn(99, movement=Movement.OUTFLOW, value_paid=Decimal("50"))
    selection = select_transactions([*ledger, open_bill], options=ReportOptions(mode="payables"))
    assert [t.id for t in selection.transactions] == ["trx-99"]


def test_mode_moves_issue_range_to_due_date():
    f = apply_mode(FilterState(start_date=dt.date(2024, 6, 1), end_date=dt.date(2024, 6, 30),
                               bank_account="Itau"), ReportMode.RECEIVABLES)
    assert f.start_date is None and f.end_date is None
    assert (f.due_date_start, f.due_date_end) == (dt.date(2024, 6, 1), dt.date(2024, 6, 30))
    assert f.bank_account == "Itau"

    explicit = apply_mode(FilterState(start_date=dt.date(2024, 6, 1), due_date_start=dt.date(2024, 7, 1)),
                          ReportMode.PAYABLES)
    assert explicit.due_date_start == dt.date(2024, 7, 1)


def test_receivables_mode_due_date_range(ledger):
    options = ReportOptions(mode="receivables")
    rows = select_transactions(ledger, {"start_date": "2024-06-24", "end_date": "2024-06-30"}, options).transactions
    # due dates run from 2024-06-11 (trx-24) to 2024-06-25 (trx-10)
    assert [t.id for t in rows] == ["trx-11", "trx-10"]


def test_sort_override_and_stability(ledger):
    options = ReportOptions(mode="receivables", sort_field="original_value", sort_direction="desc")
    rows = select_transactions(ledger, options=options).transactions
    assert rows[0].id == "trx-23"
    assert rows[-1].id == "trx-10"

    by_client = sort_transactions(ledger, "client")
    assert [t.client for t in by_client][:1] == ["Fornecedor Alfa"]
    alfa = [t.id for t in by_client if t.client == "Fornecedor Alfa"]
    assert alfa == ["trx-1", "trx-3", "trx-5", "trx-7", "trx-9"]


def test_sort_payment_date_puts_open_lines_first(ledger):
    rows = sort_transactions(ledger, "payment_date", SortDirection.ASC)
    assert rows[0].payment_date is None
    assert rows[-1].id == "trx-0"


@pytest.mark.parametrize("kwargs", [
    {"sort_field": "amount"},
    {"sort_direction": "up"},
    {"mode": "overdue"},
])
def test_report_options_reject_unknown_values(kwargs):
    with pytest.raises(ValueError):
        ReportOptions(**kwargs)


def test_types_filter_keeps_any_listed_type():
    rows = [make_txn(0, type="Serviço"), make_txn(1, type="Produto"), make_txn(2, type="Aluguel")]
    selected = select_transactions(rows, {"types": ["Produto", "Aluguel"]}).transactions
    assert sorted(t.id for t in selected) == ["trx-1", "trx-2"]


def test_generate_json_reports_mode(store):
    report = generate_json(store, options=ReportOptions(mode="receivables"))
    assert report["mode"] == "receivables"
    assert report["sort_field"] == "due_date"
    assert report["sort_direction"] == "asc"
    assert report["count"] == 10
    assert report["filters"] == {"status": "Pendente", "movement": "Entrada"}


def test_generate_excel_follows_report_order(tmp_path, store):
    path = generate_excel(store, tmp_path / "rec.xlsx", view=LedgerView.RECEIVABLE, today=TODAY,
                          options=ReportOptions(mode="receivables"))
    ws = load_workbook(path)["Transações"]
    assert ws.cell(row=2, column=1).value == "trx-23"
    assert ws.max_row == 12


def test_generate_pdf_receivables_mode(store):
    data = generate_pdf(store, issuer="ana", now=dt.datetime(2024, 6, 30, 9, 0),
                        options=ReportOptions(mode="receivables"))
    assert data.startswith(b"%PDF")
