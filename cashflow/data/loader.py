"""
Ledger sources: Google Sheets CSV export, local CSV file.

Both share parse_ledger_csv(), which finds the header row, maps columns by
header hints, and turns each data row into a Transaction.
"""
from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Sequence

import pandas as pd
import requests
from loguru import logger

from cashflow.config import (
    SPREADSHEET_ID, SPREADSHEET_GID, SPREADSHEET_EXPORT_URL, REQUEST_TIMEOUT,
    HEADER_SCAN_ROWS, HEADER_KEYWORDS, COLUMN_HINTS, DUE_DATE_HINTS,
)
from cashflow.data.normalize import (
    clean_string, parse_currency, parse_date, is_sentinel,
    normalize_status, inflow_status, normalize_type_label, infer_movement,
)
from cashflow.data.schemas import Movement, Status, Transaction, ZERO
from cashflow.exceptions import SourceError


# ---------------------------------------------------------------------------
# Spreadsheet reference parsing
# ---------------------------------------------------------------------------

_GID_RE = re.compile(r"[?&#]gid=([0-9]+)")
_SHEET_ID_RE = re.compile(r"/d/([a-zA-Z0-9-_]+)")


def parse_spreadsheet_reference(text: str) -> tuple[str, str]:
    """Accept a bare spreadsheet id or a full sheet URL, return (spreadsheet_id, gid).

    Without an explicit gid, the default tab is kept for the default sheet
    and the first tab ("0") is used for any other sheet.
    """
    cleaned = text.strip()
    m = _GID_RE.search(cleaned)
    if m:
        gid = m.group(1)
    elif cleaned != SPREADSHEET_ID:
        gid = "0"
    else:
        gid = SPREADSHEET_GID

    if "/d/" in cleaned:
        m = _SHEET_ID_RE.search(cleaned)
        if m:
            cleaned = m.group(1)
    return cleaned, gid


# ---------------------------------------------------------------------------
# CSV → rows
# ---------------------------------------------------------------------------

def _read_frame(csv_text: str, **kwargs) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(csv_text),
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
        **kwargs,
    )


def _read_rows(csv_text: str) -> list[list[str]]:
    """Tokenize CSV text into trimmed string rows, dropping rows with no content.

    Rows may be wider than the first line (a title row above the header), so a
    first pass measures the widest row and the second reads every row at that width.
    """
    if csv_text.startswith("\ufeff"):
        csv_text = csv_text[1:]
    if not csv_text.strip():
        return []
    wider: list[int] = []
    first_pass = _read_frame(csv_text, on_bad_lines=lambda fields: wider.append(len(fields)))
    width = max([first_pass.shape[1], *wider])

    df = _read_frame(csv_text, names=list(range(width))).fillna("")
    rows = []
    for values in df.itertuples(index=False, name=None):
        cells = [str(v).strip() for v in values]
        if any(cells):
            rows.append(cells)
    return rows


def _find_header_row(rows: Sequence[Sequence[str]]) -> int:
    for i, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        if len(row) > 3:
            combined = " ".join(row[:5]).lower()
            if any(kw in combined for kw in HEADER_KEYWORDS):
                return i
    return 0


def _map_columns(header: Sequence[str]) -> dict[str, int | list[int]]:
    """Column index per logical field. Falls back to the sheet's usual position."""
    header_lower = [h.lower().strip() for h in header]

    def col_idx(hints: list[str], fallback: int) -> int:
        for i, h in enumerate(header_lower):
            if any(hint in h for hint in hints):
                return i
        return fallback

    cols: dict[str, int | list[int]] = {
        name: col_idx(hints, fallback) for name, (hints, fallback) in COLUMN_HINTS.items()
    }
    # There can be several due-date columns (one per form branch)
    cols["due_date_candidates"] = [
        i for i, h in enumerate(header_lower) if any(hint in h for hint in DUE_DATE_HINTS)
    ]
    return cols


# ---------------------------------------------------------------------------
# Row → Transaction
# ---------------------------------------------------------------------------

def _build_transaction(cells: Sequence[str], cols: dict, index: int) -> Transaction:
    def get(idx: int) -> str:
        return cells[idx] if 0 <= idx < len(cells) else ""

    type_label = normalize_type_label(get(cols["type"]))
    raw_movement = get(cols["movement"])
    movement = infer_movement(type_label, raw_movement)

    raw_received = get(cols["value_received"])
    raw_billed = get(cols["total_billed"])

    value_paid = abs(parse_currency(get(cols["value_paid"])))
    value_received = abs(parse_currency(raw_received))
    billed = abs(parse_currency(raw_billed))
    original_value = abs(parse_currency(get(cols["original_value"])))
    recurring_value = abs(parse_currency(get(cols["recurring_value"])))

    # Outflows with no paid value yet carry the expected amount instead
    if movement == Movement.OUTFLOW and value_paid == ZERO:
        if original_value > 0:
            value_paid = original_value
        elif recurring_value > 0:
            value_paid = recurring_value
        elif billed > 0:
            value_paid = billed
        elif value_received > 0:
            value_paid, value_received = value_received, ZERO

    if movement == Movement.INFLOW:
        status = inflow_status(get(cols["doc_paid_receivable"]), abs(parse_currency(raw_received)))
        if value_received == ZERO:
            if value_paid > 0:
                value_received, value_paid = value_paid, ZERO
            elif status == Status.PAID and billed > 0:
                value_received = billed
    else:
        status = normalize_status(get(cols["doc_paid"]))

    issue_date = parse_date(get(cols["issue_date"]))
    raw_due = ""
    for idx in cols["due_date_candidates"]:
        candidate = get(idx)
        if candidate.strip() and idx != cols["issue_date"]:
            raw_due = candidate
            break
    due_date = parse_date(raw_due)
    if is_sentinel(due_date) and not is_sentinel(issue_date):
        due_date = issue_date

    payment_date = parse_date(get(cols["payment_date"]))

    return Transaction(
        id=f"trx-{index}",
        date=issue_date,
        due_date=due_date,
        payment_date=None if is_sentinel(payment_date) else payment_date,
        bank_account=clean_string(get(cols["bank_account"])),
        type=clean_string(type_label),
        description=clean_string(raw_movement),
        paid_by=clean_string(get(cols["paid_by"])),
        status=status,
        client=clean_string(get(cols["client"])),
        movement=movement,
        value_paid=value_paid,
        value_received=value_received,
        fees=parse_currency(get(cols["fees"])),
        extra_value=parse_currency(get(cols["extra_value"])),
        total_billed=parse_currency(raw_billed),
        tax_id=clean_string(get(cols["tax_id"])),
    )


def parse_ledger_csv(csv_text: str) -> list[Transaction]:
    """Parse a ledger CSV export into transactions, newest first."""
    rows = _read_rows(csv_text)
    if len(rows) < 2:
        return []

    header_idx = _find_header_row(rows)
    cols = _map_columns(rows[header_idx])
    logger.debug(f"Header at row {header_idx}, column map: {cols}")

    data_rows = rows[header_idx + 1:]
    transactions = [_build_transaction(cells, cols, i) for i, cells in enumerate(data_rows)]

    # Stable: rows sharing a date keep sheet order
    transactions.sort(key=lambda t: t.date, reverse=True)
    return transactions


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

class SpreadsheetSource:
    """Google Sheets tab published through the CSV export endpoint."""

    def __init__(
        self,
        spreadsheet_id: str = SPREADSHEET_ID,
        gid: str = SPREADSHEET_GID,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.gid = gid
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_reference(cls, reference: str, **kwargs) -> "SpreadsheetSource":
        spreadsheet_id, gid = parse_spreadsheet_reference(reference)
        return cls(spreadsheet_id, gid, **kwargs)

    @property
    def url(self) -> str:
        return SPREADSHEET_EXPORT_URL.format(id=self.spreadsheet_id, gid=self.gid)

    def describe(self) -> str:
        return f"spreadsheet {self.spreadsheet_id} (tab {self.gid})"

    def fetch(self) -> list[Transaction]:
        logger.info(f"Fetching ledger from {self.describe()}")
        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SourceError(f"Could not reach the spreadsheet: {exc}") from exc

        if not response.ok:
            raise SourceError(f"HTTP error {response.status_code} fetching the spreadsheet")

        response.encoding = response.encoding or "utf-8"
        text = response.text
        if text.startswith("\ufeff"):
            text = text[1:]
        head = text.lstrip()[:200].lower()
        if head.startswith("<!doctype html") or "<html" in text[:2000].lower():
            raise SourceError("The spreadsheet is private. Change its sharing settings to 'anyone with the link'.")

        try:
            transactions = parse_ledger_csv(text)
        except (pd.errors.ParserError, ValueError) as exc:
            raise SourceError(f"Malformed spreadsheet export: {exc}") from exc
        logger.info(f"Parsed {len(transactions):,} transactions")
        return transactions


LEGACY_ENCODING = "latin-1"


def decode_ledger_bytes(raw: bytes) -> str:
    """UTF-8 (with or without BOM), else Latin-1 as saved by Excel on pt-BR systems."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning(f"Ledger file is not UTF-8, decoding as {LEGACY_ENCODING}")
        return raw.decode(LEGACY_ENCODING)


class CsvFileSource:
    """A ledger CSV on disk (same layout as the spreadsheet export)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def describe(self) -> str:
        return f"file {self.path}"

    def fetch(self) -> list[Transaction]:
        logger.info(f"Reading ledger from {self.describe()}")
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise SourceError(f"Cannot read {self.path}: {exc}") from exc
        text = decode_ledger_bytes(raw)
        try:
            return parse_ledger_csv(text)
        except (pd.errors.ParserError, ValueError) as exc:
            raise SourceError(f"Malformed ledger file {self.path.name}: {exc}") from exc


def build_source(kind: str | None = None, spreadsheet: str | None = None):
    """Source selected by CASHFLOW_SOURCE (spreadsheet | csv | demo).

    `spreadsheet` overrides CASHFLOW_SPREADSHEET_ID; either may be a bare id or a sheet URL.
    """
    from cashflow.config import SOURCE_KIND, CSV_PATH, DEMO_TRANSACTION_COUNT

    kind = (kind or SOURCE_KIND).lower()
    if kind == "spreadsheet":
        return SpreadsheetSource.from_reference(spreadsheet or SPREADSHEET_ID)
    if kind == "csv":
        return CsvFileSource(CSV_PATH)
    if kind == "demo":
        from cashflow.data.demo import DemoSource
        return DemoSource(DEMO_TRANSACTION_COUNT)
    raise ValueError(f"Unknown source kind: {kind!r} (expected spreadsheet, csv or demo)")
