"""
BOM extraction from decoded documents.

This module turns decoded document content (PDF text fragments or
spreadsheet cell grids) into a de-duplicated list of BOM lines. It never
touches file bytes itself; decoding lives in the loader.

PDFs can be read with two strategies that make different trade-offs:
- "columns": anchor on the header row and read the cells under the code
  and quantity headers. Precise, but needs a header.
- "line_scan": scan every reconstructed line for a code-like token and a
  quantity, defaulting the quantity to 1. Works on headerless documents at
  the cost of more false positives.
"auto" tries "columns" and falls back to "line_scan" only when no header
is found.
"""

import logging
from collections.abc import Callable

from src.bom_engine import constants as C
from src.bom_engine.errors import NoDataExtracted, NoHeaderFound
from src.bom_engine.header import (
    is_header_text,
    locate_pdf_columns,
    locate_sheet_columns,
)
from src.bom_engine.layout import flatten_pages, group_rows, row_text
from src.bom_engine.types import (
    BomLine,
    ColumnLocator,
    Grid,
    Row,
    StatsDict,
    TextFragment,
    create_empty_stats,
)
from src.bom_engine.utils import (
    cell_to_text,
    clean_code,
    parse_quantity,
)

# Initialize Logger
logger = logging.getLogger(__name__)


def record_bom_line(
    bom: list[BomLine], code_raw: str, qty_raw: object, stats: StatsDict
) -> bool:
    """
    Core ingestion kernel: cleans, validates and records one BOM line.

    Handles:
    1. Code normalization (leading zeros, whitespace).
    2. Quantity validation (must parse to a positive number).
    3. De-duplication (first occurrence of a code wins).

    Args:
        bom: The BOM being built; mutated in place.
        code_raw: Raw code cell text.
        qty_raw: Raw quantity cell (text or number).
        stats: Stats object to record rejections and duplicates.

    Returns:
        True if a new line was appended.
    """
    code = clean_code(code_raw)
    if not code:
        stats["residuals"].append(f"Empty code: {code_raw!r}")
        return False

    qty = parse_quantity(qty_raw)
    if qty is None:
        stats["residuals"].append(f"Malformed quantity for {code}: {qty_raw!r}")
        return False

    if code in stats["seen_codes"]:
        stats["duplicates"] += 1
        return False
    stats["seen_codes"].add(code)

    bom.append({"component_code": code, "quantity": qty})
    stats["parts_found"] += 1
    return True


def _nearest_fragment(
    row: Row, key: float, tolerance: float, exclude: TextFragment | None = None
) -> TextFragment | None:
    candidates = [
        f
        for f in row
        if f is not exclude and f["text"].strip() and abs(f["x"] - key) <= tolerance
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda f: abs(f["x"] - key))


def extract_rows_by_columns(
    rows: list[Row], locator: ColumnLocator, stats: StatsDict
) -> list[BomLine]:
    """
    Reads the code/qty cells of every row below the header.

    Rows missing either cell are skipped, as are repeated header rows
    (multi-page tables reprint their header on every page).
    """
    bom: list[BomLine] = []
    tolerance = locator["tolerance"]

    for row in rows[locator["header_index"] + 1 :]:
        stats["lines_read"] += 1

        code_frag = _nearest_fragment(row, locator["code_key"], tolerance)
        qty_frag = _nearest_fragment(
            row, locator["qty_key"], tolerance, exclude=code_frag
        )
        if code_frag is None or qty_frag is None:
            stats["residuals"].append(row_text(row))
            continue

        if is_header_text(code_frag["text"]):
            continue

        record_bom_line(bom, code_frag["text"], qty_frag["text"], stats)

    return bom


def _scan_line(line: str) -> tuple[str, float] | None:
    """
    Pulls a (code, qty) pair out of a free-text line.

    The code is the first code-like token. The quantity is the number after
    a quantity keyword if present, otherwise the last plain number after
    the code, otherwise the default of 1.
    """
    tokens = line.split()
    code_idx = next(
        (i for i, t in enumerate(tokens) if C.CODE_TOKEN_RE.match(t.strip(":;,"))),
        None,
    )
    if code_idx is None:
        return None

    code = tokens[code_idx].strip(":;,")
    rest = " ".join(tokens[code_idx + 1 :])

    qty: float | None = None
    m = C.QTY_AFTER_KEYWORD_RE.search(rest)
    if m:
        qty = parse_quantity(m.group(1))
    else:
        for tok in reversed(tokens[code_idx + 1 :]):
            if C.QTY_TOKEN_RE.match(tok):
                qty = parse_quantity(tok)
                break

    if qty is None:
        qty = C.LINE_SCAN_DEFAULT_QTY

    return code, qty


def extract_lines_by_scanning(rows: list[Row], stats: StatsDict) -> list[BomLine]:
    """
    Keyword-in-line extraction for documents without a usable header.

    Every row is treated as a line of text. Missing or unreadable
    quantities default to 1.
    """
    bom: list[BomLine] = []

    for row in rows:
        line = row_text(row)
        if not line:
            continue
        stats["lines_read"] += 1

        found = _scan_line(line)
        if found is None:
            stats["residuals"].append(line)
            continue

        code, qty = found
        record_bom_line(bom, code, qty, stats)

    return bom


def _columns_strategy(rows: list[Row], stats: StatsDict) -> list[BomLine]:
    locator = locate_pdf_columns(rows)
    if locator is None:
        raise NoHeaderFound()
    return extract_rows_by_columns(rows, locator, stats)


EXTRACTION_STRATEGIES: dict[str, Callable[[list[Row], StatsDict], list[BomLine]]] = {
    C.STRATEGY_COLUMNS: _columns_strategy,
    C.STRATEGY_LINE_SCAN: extract_lines_by_scanning,
}


def _reset_counts(stats: StatsDict) -> None:
    stats["lines_read"] = 0
    stats["parts_found"] = 0
    stats["residuals"].clear()
    stats["seen_codes"].clear()
    stats["duplicates"] = 0


def extract_bom_from_pdf(
    pages: list[list[TextFragment]],
    strategy: str = C.STRATEGY_AUTO,
    stats: StatsDict | None = None,
    vertical_tolerance: float = C.VERTICAL_TOLERANCE,
) -> list[BomLine]:
    """
    Extracts a BOM from the text layer of a PDF.

    All pages must already be decoded: rows are reconstructed over the
    whole document in one pass.

    Args:
        pages: Per-page fragment lists, in page order.
        strategy: "columns", "line_scan" or "auto".
        stats: Optional stats object; filled with counts and rejections.
        vertical_tolerance: Row clustering tolerance.

    Returns:
        A non-empty, de-duplicated list of BOM lines.

    Raises:
        NoHeaderFound: "columns" strategy and no header row.
        NoDataExtracted: No valid line survived extraction.
        ValueError: Unknown strategy name.
    """
    if stats is None:
        stats = create_empty_stats()

    if strategy == C.STRATEGY_AUTO:
        chain = [C.STRATEGY_COLUMNS, C.STRATEGY_LINE_SCAN]
    elif strategy in EXTRACTION_STRATEGIES:
        chain = [strategy]
    else:
        raise ValueError(f"Unknown extraction strategy: {strategy}")

    rows = group_rows(flatten_pages(pages), tolerance=vertical_tolerance)

    bom: list[BomLine] = []
    for i, name in enumerate(chain):
        try:
            bom = EXTRACTION_STRATEGIES[name](rows, stats)
        except NoHeaderFound:
            if i == len(chain) - 1:
                raise
            logger.info(f"No header row found; falling back to '{chain[i + 1]}'")
            _reset_counts(stats)
            continue
        stats["strategy"] = name
        break

    if not bom:
        raise NoDataExtracted()

    logger.debug(f"Extracted {len(bom)} lines from PDF via '{stats['strategy']}'")
    return bom


def extract_bom_from_spreadsheet(
    grid: Grid, stats: StatsDict | None = None
) -> list[BomLine]:
    """
    Extracts a BOM from a spreadsheet cell grid.

    Columns come from the header row if one is found in the first rows;
    otherwise column 0 is the code and the quantity column is guessed.
    Rows with an empty code cell are skipped; rows with an invalid quantity
    are dropped, never defaulted.

    Args:
        grid: Row-major cell grid (cells may be text, numbers or None).
        stats: Optional stats object; filled with counts and rejections.

    Returns:
        A non-empty, de-duplicated list of BOM lines.

    Raises:
        NoDataExtracted: No valid line survived extraction.
    """
    if stats is None:
        stats = create_empty_stats()

    locator = locate_sheet_columns(grid)
    code_col = int(locator["code_key"])
    qty_col = int(locator["qty_key"])

    bom: list[BomLine] = []
    for row in grid[locator["header_index"] + 1 :]:
        code_cell = cell_to_text(row[code_col]) if code_col < len(row) else ""
        if not code_cell:
            continue
        stats["lines_read"] += 1

        qty_cell = row[qty_col] if qty_col < len(row) else None
        record_bom_line(bom, code_cell, qty_cell, stats)

    stats["strategy"] = C.STRATEGY_SPREADSHEET

    if not bom:
        raise NoDataExtracted()

    return bom
