import datetime as dt
from decimal import Decimal

from openpyxl import load_workbook

from cashflow.data.schemas import SENTINEL_DATE
from cashflow.excel import KpiCard, LedgerWorkbook, cell_value

COLUMNS = [("id", "text", "ID"), ("due_date", "date", "Vencimento"), ("amount", "currency", "Valor")]


def test_cell_value():
    assert cell_value(Decimal("1.25")) == 1.25
    assert cell_value(SENTINEL_DATE) is None
    assert cell_value(dt.date(2024, 1, 2)) == dt.date(2024, 1, 2)
    assert cell_value("x") == "x"


def test_table_totals_and_tags(tmp_path):
    book = LedgerWorkbook()
    ws = book.sheet("Dados")
    rows = [
        {"id": "a", "due_date": dt.date(2024, 1, 2), "amount": Decimal("0.10")},
        {"id": "b", "due_date": SENTINEL_DATE, "amount": Decimal("0.20")},
        {"id": "c", "due_date": dt.date(2024, 1, 3), "amount": None},
    ]
    next_row = book.table(ws, COLUMNS, rows, tags=["paid", None, "overdue"])
    assert next_row == 6

    ws = load_workbook(book.save(tmp_path / "t.xlsx"))["Dados"]
    assert [c.value for c in ws[1]] == ["ID", "Vencimento", "Valor"]
    assert ws["B3"].value is None
    assert ws["A5"].value == "TOTAL"
    assert ws["C5"].value == 0.3
    assert ws["C2"].number_format == '"R$" #,##0.00'
    assert ws.freeze_panes == "A2"


def test_summary_sheet_layout(tmp_path):
    book = LedgerWorkbook()
    ws = book.sheet("Resumo")
    row = book.banner(ws, "Título", "Sub")
    row = book.section(ws, row, "SALDO")
    row = book.cards(ws, row, [KpiCard(Decimal("-5"), "SALDO", signed=True), KpiCard(3, "N", fmt="number")])
    book.pairs(ws, row, {"status": "Pago"})
    book.sheet("Outra")

    wb = load_workbook(book.save(tmp_path / "s.xlsx"))
    assert wb.sheetnames == ["Resumo", "Outra"]
    ws = wb["Resumo"]
    assert ws["A1"].value == "Título"
    assert ws["A6"].value == -5
    assert ws["A7"].value == "SALDO"
    assert ws["C6"].value == 3
    assert ws.cell(row=9, column=1).value == "status"
    assert ws.cell(row=9, column=2).value == "Pago"
