#!/usr/bin/env python3
"""
Cash-flow dashboard CLI: API server, ledger summary, and report exports.

USAGE:
  python -m cashflow.cli serve                                  # Start API server
  python -m cashflow.cli serve --port 8000

  python -m cashflow.cli summary                                # KPIs of the whole ledger
  python -m cashflow.cli summary --movement Saída --status Pendente --view payable

  python -m cashflow.cli export --format csv                    # CSV of the filtered ledger
  python -m cashflow.cli export --format pdf --client "Silva" --issuer "Maria"
  python -m cashflow.cli export --format xlsx --source demo --output ./out
  python -m cashflow.cli export --format pdf --mode receivables   # Open receivables by due date
  python -m cashflow.cli summary --spreadsheet "https://docs.google.com/spreadsheets/d/<id>/edit#gid=0"

  python -m cashflow.cli hash-password "secret"                 # Hash for the users file
"""
from __future__ import annotations

import argparse
import datetime as dt
import os
from pathlib import Path

from cashflow.analytics.common import format_brl
from cashflow.analytics.stats import detailed_kpi, global_stats
from cashflow.analytics.table import LedgerView, view_summary
from cashflow.config import REPORTS_FOLDER
from cashflow.data.loader import build_source
from cashflow.data.schemas import FilterState
from cashflow.data.store import TransactionStore
from cashflow.exceptions import SourceError
from cashflow.reports.selection import SORT_KEYS, ReportMode, ReportOptions, SortDirection, select_transactions
from cashflow.logs import configure_logging

FILTER_FLAGS = [
    ("id", "Transaction id substring"),
    ("start_date", "Issue date from (YYYY-MM-DD)"),
    ("end_date", "Issue date to (YYYY-MM-DD)"),
    ("due_date_start", "Due date from (YYYY-MM-DD)"),
    ("due_date_end", "Due date to (YYYY-MM-DD)"),
    ("payment_date_start", "Payment date from (YYYY-MM-DD)"),
    ("payment_date_end", "Payment date to (YYYY-MM-DD)"),
    ("receipt_date_start", "Receipt date from (YYYY-MM-DD)"),
    ("receipt_date_end", "Receipt date to (YYYY-MM-DD)"),
    ("bank_account", "Exact bank account"),
    ("type", "Exact type label"),
    ("status", "Pago | Pendente | Agendado"),
    ("client", "Client substring"),
    ("paid_by", "Exact payer"),
    ("movement", "Entrada | Saída"),
    ("search", "Free text over all fields"),
]


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--source", choices=["spreadsheet", "csv", "demo"], help="Override CASHFLOW_SOURCE")
    parser.add_argument("--spreadsheet", help="Sheet id or URL (overrides CASHFLOW_SPREADSHEET_ID)")
    parser.add_argument("--mode", choices=[m.value for m in ReportMode], default=ReportMode.GENERAL.value,
                        help="general, or open payables/receivables by due date")
    parser.add_argument("--sort", dest="sort_field", choices=list(SORT_KEYS), help="Sort field (default per mode)")
    parser.add_argument("--direction", dest="sort_direction", choices=[d.value for d in SortDirection],
                        help="Sort direction (default per mode)")
    parser.add_argument("--types", nargs="+", help="Keep rows of any of these type labels")
    parser.add_argument("--view", choices=[v.value for v in LedgerView], default=LedgerView.MIXED.value,
                        help="Table layout (default mixed)")
    for name, help_text in FILTER_FLAGS:
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, help=help_text)


def _build_filters(args) -> FilterState:
    values = {name: getattr(args, name, None) for name, _ in FILTER_FLAGS}
    values["types"] = args.types
    return FilterState.from_dict(values)


def _build_options(args) -> ReportOptions:
    return ReportOptions(mode=args.mode, sort_field=args.sort_field, sort_direction=args.sort_direction)


def _load_store(args) -> TransactionStore | None:
    store = TransactionStore(build_source(args.source, args.spreadsheet))
    try:
        return store.load()
    except SourceError as exc:
        print(f"\n  Could not load ledger: {exc}\n")
        return None


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Cash-flow Dashboard API on port {args.port}...")
    uvicorn.run("cashflow.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def cmd_summary(args) -> int:
    """Print KPIs for the filtered ledger."""
    print("\n" + "=" * 70)
    print("  CASH-FLOW DASHBOARD - LEDGER SUMMARY")
    print("=" * 70)

    store = _load_store(args)
    if store is None:
        return 1

    selection = select_transactions(store.transactions(), args.filters, args.options)
    filters, filtered = selection.filters, selection.transactions
    view = LedgerView(args.view)
    kpi = detailed_kpi(filtered)
    position = global_stats(store.transactions())

    print(f"\n  Source: {store.source.describe()}")
    print(f"  Period: {store.date_range()}")
    if args.options.mode != ReportMode.GENERAL:
        print(f"  Mode: {args.options.mode.value}")
    if not filters.is_empty:
        print(f"  Filters: {', '.join(f'{k}={v}' for k, v in filters.active().items())}")
    print(f"  Transactions: {len(filtered):,} of {store.row_count():,}\n")

    print(f"  {'Received':<28}{format_brl(kpi.total_received):>20}")
    print(f"  {'  settled':<28}{format_brl(kpi.settled_receivables):>20}")
    print(f"  {'  pending':<28}{format_brl(kpi.pending_receivables):>20}")
    print(f"  {'Paid':<28}{format_brl(kpi.total_paid):>20}")
    print(f"  {'  settled':<28}{format_brl(kpi.settled_payables):>20}")
    print(f"  {'  pending':<28}{format_brl(kpi.pending_payables):>20}")
    print(f"  {'Balance':<28}{format_brl(kpi.balance):>20}")

    if view != LedgerView.MIXED:
        vs = view_summary(filtered, view)
        print(f"\n  {view.value.upper()} VIEW")
        print(f"  {'Total':<28}{format_brl(vs.total):>20}")
        print(f"  {'Settled':<28}{format_brl(vs.settled):>20}")
        print(f"  {'Pending':<28}{format_brl(vs.pending):>20}")

    print("\n  WHOLE LEDGER")
    print(f"  {'Cash balance':<28}{format_brl(position.cash_balance):>20}")
    print(f"  {'Pending receivables':<28}{format_brl(position.pending_receivables):>20}")
    print(f"  {'Pending payables':<28}{format_brl(position.pending_payables):>20}")
    print("=" * 70 + "\n")
    return 0


def cmd_export(args) -> int:
    """Write a CSV, Excel, or PDF export of the filtered ledger."""
    from cashflow.reports import csv_export, ledger_report

    store = _load_store(args)
    if store is None:
        return 1

    filters, options = args.filters, args.options
    view = LedgerView(args.view)
    output = Path(args.output)
    output.mkdir(parents=True, exist_ok=True)

    if args.format == "csv":
        path = csv_export.write_csv(select_transactions(store.transactions(), filters, options).transactions, output)
    elif args.format == "xlsx":
        path = ledger_report.generate_excel(
            store, output / f"Relatorio_Financeiro_{dt.datetime.now():%Y%m%dT%H%M%S}.xlsx",
            filters, view, args.issuer, options=options,
        )
    else:
        path = ledger_report.write_pdf(store, output / ledger_report.pdf_filename(), filters, view, args.issuer,
                                       options=options)

    print(f"\n  Report saved to: {path}\n")
    return 0


def cmd_hash_password(args) -> int:
    from cashflow.auth.gate import hash_password
    print(hash_password(args.password))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Cash-flow Dashboard - payables/receivables ledger tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    summary_parser = subparsers.add_parser("summary", help="Print ledger KPIs")
    _add_filter_args(summary_parser)
    summary_parser.set_defaults(func=cmd_summary)

    export_parser = subparsers.add_parser("export", help="Export the filtered ledger")
    export_parser.add_argument("--format", choices=["csv", "xlsx", "pdf"], default="csv", help="Output format")
    export_parser.add_argument("--output", default=str(REPORTS_FOLDER), help="Output directory")
    export_parser.add_argument("--issuer", help="Name printed as the report issuer")
    _add_filter_args(export_parser)
    export_parser.set_defaults(func=cmd_export)

    hash_parser = subparsers.add_parser("hash-password", help="SHA-256 hash for the users file")
    hash_parser.add_argument("password")
    hash_parser.set_defaults(func=cmd_hash_password)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    if hasattr(args, "view"):
        try:
            args.filters = _build_filters(args)
            args.options = _build_options(args)
        except ValueError as exc:
            parser.error(f"{args.command}: {exc}")

    configure_logging()
    return args.func(args) or 0


if __name__ == "__main__":
    raise SystemExit(main())
