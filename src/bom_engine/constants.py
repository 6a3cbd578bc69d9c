"""
Static Knowledge Base for the BOM Engine.

This module serves as the central repository for:
1.  **Layout Tolerances:** How far apart (in PDF points) two fragments may be
    and still belong to the same row or column.
2.  **Parsing Heuristics:** Keyword lists for locating the code and quantity
    columns in unstructured documents (IT/EN labels).
3.  **Fallback Rules:** Column preferences used when a spreadsheet carries no
    recognizable header.
4.  **Catalog Rules:** Required headers for bulk component import and the
    seed catalog shown on first launch.
"""

import re
from typing import Any

# --- Layout Tolerances ---

# Max vertical distance between a fragment and the first fragment of a row.
# PDF producers vary in baseline jitter; 5-10 points covers the ones seen so far.
VERTICAL_TOLERANCE = 5.0

# Max horizontal distance between a data cell and its header anchor.
HORIZONTAL_TOLERANCE = 20.0

# --- Header Keywords ---

# Matched case-insensitively as substrings of a cell/fragment.
CODE_KEYWORDS = (
    "part code",
    "part number",
    "part no",
    "code",
    "codice",
    "articolo",
    "cod.",
    "seko",
)

QUANTITY_KEYWORDS = (
    "qty",
    "q.ty",
    "q.tà",
    "q.ta",
    "quantity",
    "quantità",
    "quantita",
    "qta",
    "qtà",
)

# Spreadsheets: the header is expected near the top of the sheet.
MAX_HEADER_SCAN_ROWS = 20

# Spreadsheets without a header: code is column 0, quantity is the first of
# these columns whose sample value parses as a number.
CODE_COLUMN_DEFAULT = 0
QTY_COLUMN_PREFERENCE = (3, 1)
QTY_COLUMN_DEFAULT = 1

# --- Line Scanning ---

# Code-like tokens: short alpha prefix + 4 or more digits, or 5+ digits.
# Plain 4-digit numbers are position counters (0010, 0020...), not codes.
CODE_TOKEN_RE = re.compile(
    r"^(?:[A-Z]{1,3}\d{4,}[A-Z0-9\-]*|\d{5,})$", re.IGNORECASE
)

# A number, optionally with decimal comma/point. Zero-padded tokens (0603,
# 0010) are package sizes or counters, never quantities.
QTY_TOKEN_RE = re.compile(r"^(?:0|[1-9]\d*)(?:[.,]\d+)?$")

# "Qty: 4", "Q.tà 2,5", "quantità=10"
QTY_AFTER_KEYWORD_RE = re.compile(
    r"\b(?:q\.?\s?t[yàa]|quantit[yàa])\.?\s*[:=]?\s*(\d+(?:[.,]\d+)?)",
    re.IGNORECASE,
)

# Quantity used by the line scanner when a line carries no usable number.
LINE_SCAN_DEFAULT_QTY = 1.0

# --- Extraction Strategies ---

STRATEGY_COLUMNS = "columns"
STRATEGY_LINE_SCAN = "line_scan"
STRATEGY_AUTO = "auto"
STRATEGY_SPREADSHEET = "spreadsheet"

# --- Documents ---

PDF_EXTENSIONS = (".pdf",)
SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm")
DELIMITED_EXTENSIONS = (".csv", ".txt")

URL_TIMEOUT_SECONDS = 10

# --- Catalog ---

DESCRIPTION_PLACEHOLDER = "Description unavailable"

STATUS_FOUND = "Found"
STATUS_NOT_FOUND = "Not Found"

REQUIRED_IMPORT_HEADERS = (
    "sekoCode",
    "description",
    "supplierName",
    "supplierPartNumber",
    "cost",
    "leadTime",
)
OPTIONAL_IMPORT_HEADERS = ("aselCode", "packaging")

# Internal warehouse code is derived from the SEKO code.
LF_WMS_PREFIX = "AS"

SAMPLE_COMPONENTS: list[dict[str, Any]] = [
    {
        "id": "1",
        "seko_code": "514846",
        "asel_code": "C-RES-10K-0603",
        "lf_wms_code": "AS514846",
        "description": "Resistore 10k Ohm, 1%, 0.1W, SMD 0603",
        "suppliers": [
            {
                "id": "s1-1",
                "name": "Mouser",
                "part_number": "MOU-514846-10K",
                "cost": 0.05,
                "lead_time": "5 giorni",
                "packaging": "Nastro",
            },
            {
                "id": "s1-2",
                "name": "Digi-Key",
                "part_number": "DK-RES-10K-R",
                "cost": 0.06,
                "lead_time": "3 giorni",
                "packaging": "Nastro",
            },
        ],
    },
    {
        "id": "2",
        "seko_code": "823301",
        "asel_code": "C-CAP-100NF-0805",
        "lf_wms_code": "AS823301",
        "description": "Condensatore Ceramico 100nF, 50V, X7R, SMD 0805",
        "suppliers": [
            {
                "id": "s2-1",
                "name": "Farnell",
                "part_number": "FAR-CC0805-100N",
                "cost": 0.1,
                "lead_time": "7 giorni",
                "packaging": "Bobina",
            },
        ],
    },
    {
        "id": "3",
        "seko_code": "450012",
        "asel_code": "C-MCU-STM32F4",
        "lf_wms_code": "AS450012",
        "description": "Microcontrollore STM32F407VGT6, ARM Cortex-M4",
        "suppliers": [
            {
                "id": "s3-1",
                "name": "Mouser",
                "part_number": "MOU-STM32F407",
                "cost": 12.5,
                "lead_time": "21 giorni",
                "packaging": "Vassoio",
            },
            {
                "id": "s3-2",
                "name": "Arrow",
                "part_number": "ARW-STM-F407",
                "cost": 12.8,
                "lead_time": "18 giorni",
                "packaging": "Vassoio",
            },
        ],
    },
]
