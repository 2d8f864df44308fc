"""
Cashflow Dashboard configuration: paths, data source, column hints, constants.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with CASHFLOW_DATA_DIR env var for cloud deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("CASHFLOW_DATA_DIR", str(Path.home() / "Cashflow Dashboard")))
BASE_FOLDER = _data_dir
REPORTS_FOLDER = _data_dir / "reports"
LOGS_FOLDER = _data_dir / "logs"

# ---------------------------------------------------------------------------
# Data source
#   "spreadsheet" = Google Sheets CSV export (default)
#   "csv"         = local CSV file at CSV_PATH
#   "demo"        = generated ledger, no network
# ---------------------------------------------------------------------------
SOURCE_KIND = os.environ.get("CASHFLOW_SOURCE", "spreadsheet").lower()
SPREADSHEET_ID = os.environ.get("CASHFLOW_SPREADSHEET_ID", "17mHd8eqKoj7Cl6E2MCkr0PczFj-lKv_vmFRCY5hypwg")
SPREADSHEET_GID = os.environ.get("CASHFLOW_SPREADSHEET_GID", "1276925607")
SPREADSHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{id}/export?format=csv&gid={gid}"
CSV_PATH = Path(os.environ.get("CASHFLOW_CSV_PATH", str(_data_dir / "ledger.csv")))
REQUEST_TIMEOUT = float(os.environ.get("CASHFLOW_REQUEST_TIMEOUT", "30"))
DEMO_TRANSACTION_COUNT = 150

# Seconds between background re-fetches of the ledger (0 disables)
AUTO_REFRESH_SECONDS = int(os.environ.get("CASHFLOW_AUTO_REFRESH_SECONDS", "120"))

# ---------------------------------------------------------------------------
# Users: JSON list of {id, username, name, role, active, email, password_hash}
# Falls back to the built-in table when the file is missing
# ---------------------------------------------------------------------------
USERS_FILE = Path(os.environ.get("CASHFLOW_USERS_FILE", str(_data_dir / "users.json")))

# SHA-256 of "admin"
DEFAULT_PASSWORD_HASH = "8c6976e5b5410415bde908bd4dee15dfb167a9c873fc4bb8a81f6f2ab448a918"

DEFAULT_USERS = [
    {"id": "1", "username": "admin", "name": "Administrador", "role": "admin",
     "active": True, "email": "admin@spcontabil.com.br", "password_hash": DEFAULT_PASSWORD_HASH},
    {"id": "2", "username": "operador1", "name": "Operador 1", "role": "operacional",
     "active": True, "email": "op1@spcontabil.com.br", "password_hash": DEFAULT_PASSWORD_HASH},
    {"id": "3", "username": "operador2", "name": "Operador 2", "role": "operacional",
     "active": True, "email": "op2@spcontabil.com.br", "password_hash": DEFAULT_PASSWORD_HASH},
]

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("CASHFLOW_LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.environ.get("CASHFLOW_LOG_TO_FILE", "0") == "1"

# ---------------------------------------------------------------------------
# Spreadsheet column discovery
# (hints matched case-insensitively as substrings of the header, positional fallback)
# ---------------------------------------------------------------------------
HEADER_SCAN_ROWS = 10
HEADER_KEYWORDS = ["tipo de lan", "contas banc", "data"]

COLUMN_HINTS = {
    "issue_date": (["data lança", "data lanca"], 1),
    "bank_account": (["contas banc", "conta banc"], 2),
    "type": (["tipo de lan", "tipo lan"], 3),
    "paid_by": (["pago por"], 4),
    "movement": (["movimentação", "movimentacao"], 5),
    "doc_paid": (["doc.pago", "documento pago"], 9),
    "payment_date": (["data baixa", "data pagamento"], 10),
    "original_value": (["valor ref", "valor original"], 11),
    "recurring_value": (["recorrente"], 12),
    "value_paid": (["valor pago"], 13),
    "client": (["nome empresa", "razao social", "razão social", "credor", "sacado"], 26),
    "fees": (["honorários", "honorarios"], 27),
    "extra_value": (["extras"], 28),
    "total_billed": (["total cobrança", "total cobranca"], 30),
    "value_received": (["valor recebido"], 31),
    "doc_paid_receivable": (["doc.pago - receber", "doc.pago receber", "pago - receber",
                             "status receber", "recebido?"], 35),
    "tax_id": (["cpf", "cnpj", "documento", "cprf"], -1),
}

# Every column matching one of these is a due-date candidate (first non-empty wins)
DUE_DATE_HINTS = ["vencimento", "data a pagar", "data.vencimento"]

# ---------------------------------------------------------------------------
# Classification keywords
# ---------------------------------------------------------------------------
OUTFLOW_TYPE_KEYWORDS = ["saída", "saida", "pagar", "despesa", "fornecedor"]
INFLOW_TYPE_KEYWORDS = ["entrada", "receber", "recebimento", "receita"]
OUTFLOW_MOVEMENT_KEYWORDS = ["saída", "saida", "despesa"]

PAYABLE_TYPE_LABEL = "Saída de Caixa / Contas a Pagar"
RECEIVABLE_TYPE_LABEL = "Entrada de Caixa / Contas a Receber"

PAID_STATUS_WORDS = {"sim", "pago", "ok", "liquidado", "recebido"}
PENDING_STATUS_WORDS = {"não", "nao", "pendente", "aberto"}

# Statuses counted as realized in the global cash position
REALIZED_STATUS_WORDS = {"pago", "recebido", "sim", "ok"}

SENTINEL_DATE_ISO = "1970-01-01"

# ---------------------------------------------------------------------------
# Query defaults
# ---------------------------------------------------------------------------
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 1000

# Fields offered as filter option lists
OPTION_FIELDS = ["bank_account", "type", "status", "client", "paid_by", "movement"]

# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------
CSV_EXPORT_COLUMNS = [
    ("id", "ID"),
    ("date", "Date"),
    ("bank_account", "Bank Account"),
    ("type", "Type"),
    ("status", "Status"),
    ("client", "Client"),
    ("paid_by", "Paid By"),
    ("movement", "Movement"),
    ("value_paid", "Value Paid"),
    ("value_received", "Value Received"),
]
CSV_DELIMITER = ";"

REPORT_TITLE = "Relatório Financeiro Detalhado"
REPORT_SUBTITLE = "SP Contábil - Controle de Contas e Movimentações"
