"""Query engine, statistics, and table presentation over the ledger."""
from .ledger import query_transactions, apply_filters, compute_kpi, paginate
from .stats import global_stats, detailed_kpi, GlobalStatsView
from .table import LedgerView, overdue_days, remaining_balance, render_rows, view_columns, view_summary
