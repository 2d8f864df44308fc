"""
Excel colors, fonts, fills, borders, and alignments for ledger workbooks.
"""
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

# ---------------------------------------------------------------------------
# Color constants
# ---------------------------------------------------------------------------
PRIMARY_BLUE = "1E40AF"
SLATE = "475569"
LIGHT_SLATE = "F8FAFC"
ALTERNATE_ROW = "F1F5F9"
WHITE = "FFFFFF"
BLACK = "000000"
INFLOW_GREEN = "16A34A"
LIGHT_GREEN = "DCFCE7"
OUTFLOW_RED = "DC2626"
LIGHT_RED = "FEE2E2"
PENDING_ORANGE = "EA580C"
LIGHT_ORANGE = "FFEDD5"
TOTAL_ROW_BG = "DBEAFE"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
TITLE_FONT = Font(name="Calibri", size=20, bold=True, color=PRIMARY_BLUE)
SUBTITLE_FONT = Font(name="Calibri", size=11, italic=True, color=SLATE)
HEADER_FONT = Font(name="Calibri", size=11, bold=True, color=WHITE)
DATA_FONT = Font(name="Calibri", size=10, color=BLACK)
TOTAL_FONT = Font(name="Calibri", size=10, bold=True, color=BLACK)
SECTION_FONT = Font(name="Calibri", size=14, bold=True, color=PRIMARY_BLUE)
KPI_VALUE_FONT = Font(name="Calibri", size=20, bold=True, color=PRIMARY_BLUE)
KPI_LABEL_FONT = Font(name="Calibri", size=10, color=SLATE)
POSITIVE_KPI_FONT = Font(name="Calibri", size=20, bold=True, color=INFLOW_GREEN)
NEGATIVE_KPI_FONT = Font(name="Calibri", size=20, bold=True, color=OUTFLOW_RED)

# ---------------------------------------------------------------------------
# Fills
# ---------------------------------------------------------------------------
HEADER_FILL = PatternFill(start_color=PRIMARY_BLUE, end_color=PRIMARY_BLUE, fill_type="solid")
ALTERNATE_FILL = PatternFill(start_color=ALTERNATE_ROW, end_color=ALTERNATE_ROW, fill_type="solid")
TOTAL_FILL = PatternFill(start_color=TOTAL_ROW_BG, end_color=TOTAL_ROW_BG, fill_type="solid")
GREEN_FILL = PatternFill(start_color=LIGHT_GREEN, end_color=LIGHT_GREEN, fill_type="solid")
WARNING_FILL = PatternFill(start_color=LIGHT_RED, end_color=LIGHT_RED, fill_type="solid")
ORANGE_FILL = PatternFill(start_color=LIGHT_ORANGE, end_color=LIGHT_ORANGE, fill_type="solid")

# ---------------------------------------------------------------------------
# Borders
# ---------------------------------------------------------------------------
THIN_BORDER = Border(
    left=Side(style="thin", color="CBD5E1"),
    right=Side(style="thin", color="CBD5E1"),
    top=Side(style="thin", color="CBD5E1"),
    bottom=Side(style="thin", color="CBD5E1"),
)
HEADER_BORDER = Border(
    left=Side(style="thin", color=PRIMARY_BLUE),
    right=Side(style="thin", color=PRIMARY_BLUE),
    top=Side(style="thin", color=PRIMARY_BLUE),
    bottom=Side(style="medium", color=PRIMARY_BLUE),
)
TOTAL_BORDER = Border(
    left=Side(style="thin", color="94A3B8"),
    right=Side(style="thin", color="94A3B8"),
    top=Side(style="medium", color="94A3B8"),
    bottom=Side(style="medium", color="94A3B8"),
)

# ---------------------------------------------------------------------------
# Alignments
# ---------------------------------------------------------------------------
CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")

# ---------------------------------------------------------------------------
# Row highlight name → fill
# ---------------------------------------------------------------------------
HIGHLIGHT_FILLS = {
    "paid": GREEN_FILL,
    "overdue": WARNING_FILL,
    "pending": ORANGE_FILL,
}

# Excel number formats
BRL_FORMAT = '"R$" #,##0.00'
BRL_KPI_FORMAT = '"R$" #,##0'
DATE_FORMAT = "DD/MM/YYYY"
