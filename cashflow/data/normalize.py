"""
Value parsing and classification for raw spreadsheet cells.

All of this is specific to the exporting spreadsheet: pt-BR currency strings
("R$ 1.234,56"), dd/mm/yyyy dates, free-text "Doc.Pago" status cells.
"""
from __future__ import annotations

import datetime as dt
import re
import unicodedata
from decimal import Decimal, InvalidOperation

from cashflow.config import (
    OUTFLOW_TYPE_KEYWORDS, INFLOW_TYPE_KEYWORDS, OUTFLOW_MOVEMENT_KEYWORDS,
    PAYABLE_TYPE_LABEL, RECEIVABLE_TYPE_LABEL,
    PAID_STATUS_WORDS, PENDING_STATUS_WORDS,
)
from cashflow.data.schemas import Movement, Status, SENTINEL_DATE, ZERO


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------

_EDGE_QUOTES_RE = re.compile(r"^[\"']|[\"']$")
_NEWLINES_RE = re.compile(r"[\r\n]+")


def clean_string(value) -> str:
    """Strip surrounding quotes, fold line breaks into spaces, trim."""
    if value is None:
        return ""
    text = str(value)
    if not text:
        return ""
    text = _EDGE_QUOTES_RE.sub("", text)
    return _NEWLINES_RE.sub(" ", text).strip()


def fold_accents(text: str) -> str:
    """Lower-case and drop diacritics ("Saída" -> "saida")."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

_CURRENCY_NOISE_RE = re.compile(r"[R$\s]")
_NUMBER_PREFIX_RE = re.compile(r"-?(\d+(\.\d*)?|\.\d+)")


def parse_currency(value) -> Decimal:
    """Parse "R$ 1.234,56", "1,234.56", "(300,00)" and friends into a Decimal.

    Whichever of ',' / '.' appears last is the decimal separator.
    Anything unparseable is zero.
    """
    if value is None:
        return ZERO
    clean = _EDGE_QUOTES_RE.sub("", str(value)).strip()
    clean = _CURRENCY_NOISE_RE.sub("", clean)
    if clean.startswith("(") and clean.endswith(")"):
        clean = "-" + clean[1:-1]
    if not clean or clean == "-":
        return ZERO

    last_comma = clean.rfind(",")
    last_dot = clean.rfind(".")
    if last_comma > last_dot:
        clean = clean.replace(".", "").replace(",", ".", 1)
    elif last_dot > last_comma:
        clean = clean.replace(",", "")

    clean = re.sub(r"[^0-9.\-]", "", clean)
    m = _NUMBER_PREFIX_RE.match(clean)
    if not m:
        return ZERO
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return ZERO


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_PT_BR_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})")
_ISO_DATE_RE = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})")


def parse_date(value) -> dt.date:
    """Parse dd/mm/yyyy (or dd-mm-yy) and yyyy-mm-dd cells.

    Returns SENTINEL_DATE (1970-01-01) for empty or malformed input so that
    queries never have to deal with missing dates.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not value:
        return SENTINEL_DATE

    parts = _EDGE_QUOTES_RE.sub("", str(value)).strip().split(" ")
    clean = parts[0] if parts else ""

    m = _PT_BR_DATE_RE.match(clean)
    if m:
        day, month, year = m.group(1), m.group(2), m.group(3)
        if len(year) == 2:
            year = "20" + year
        return _safe_date(int(year), int(month), int(day))

    m = _ISO_DATE_RE.match(clean)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    return SENTINEL_DATE


def _safe_date(year: int, month: int, day: int) -> dt.date:
    try:
        return dt.date(year, month, day)
    except ValueError:
        return SENTINEL_DATE


def is_sentinel(day: dt.date | None) -> bool:
    return day is None or day == SENTINEL_DATE


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def normalize_status(value) -> Status:
    """Map free-text status cells ("SIM", "ok", "liquidado", "agendado"...) to Status."""
    if not value:
        return Status.PENDING
    v = str(value).lower().strip()
    if v in PAID_STATUS_WORDS:
        return Status.PAID
    if v in PENDING_STATUS_WORDS:
        return Status.PENDING
    if "agenda" in v:
        return Status.SCHEDULED
    return Status.PENDING


def inflow_status(doc_paid_cell: str, raw_received: Decimal) -> Status:
    """Status of an inflow row: the "Doc.Pago - Receber" flag wins, then any received value."""
    flag = (doc_paid_cell or "").lower().strip()
    if flag in ("sim", "s") or normalize_status(doc_paid_cell) == Status.PAID:
        return Status.PAID
    if raw_received > 0:
        return Status.PAID
    return Status.PENDING


# ---------------------------------------------------------------------------
# Type & movement
# ---------------------------------------------------------------------------

def normalize_type_label(raw_type: str) -> str:
    """Collapse spelling variants of the two cash-flow type labels into one each."""
    t = (raw_type or "").lower()
    if "pagar" in t and ("saida" in t or "saída" in t):
        return PAYABLE_TYPE_LABEL
    if "receber" in t and "entrada" in t:
        return RECEIVABLE_TYPE_LABEL
    return raw_type


def infer_movement(type_label: str, raw_movement: str) -> Movement:
    """Direction of a row: the type column decides, the movement column breaks ties.

    Defaults to inflow, as the spreadsheet does.
    """
    t = (type_label or "").lower()
    if any(kw in t for kw in OUTFLOW_TYPE_KEYWORDS):
        return Movement.OUTFLOW
    if any(kw in t for kw in INFLOW_TYPE_KEYWORDS):
        return Movement.INFLOW
    if raw_movement:
        mov = raw_movement.lower()
        if any(kw in mov for kw in OUTFLOW_MOVEMENT_KEYWORDS):
            return Movement.OUTFLOW
    return Movement.INFLOW
