"""Ledger records, sources, normalization, and the in-memory store."""
from .schemas import Transaction, FilterState, KPIData, PaginatedResult, QueryResult, Status, Movement
from .loader import parse_ledger_csv, parse_spreadsheet_reference, SpreadsheetSource, CsvFileSource, build_source
from .demo import DemoSource, generate_transactions
from .store import TransactionStore, AutoRefresher
