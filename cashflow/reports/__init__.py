"""CSV, Excel, and PDF exports of the filtered ledger."""
from .csv_export import export_csv, export_filename, write_csv
from .selection import (
    ReportMode, ReportOptions, ReportSelection, SORT_KEYS, SortDirection,
    apply_mode, original_value, select_transactions, settled_value, sort_transactions,
)
from .ledger_report import generate_json, generate_excel, generate_pdf, pdf_filename, write_pdf
