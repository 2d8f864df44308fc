"""Excel styling, formatting, and writing utilities."""
from .formatters import cell_value, fit_columns, kpi_card, style_cell, style_header
from .writer import KpiCard, LedgerWorkbook
