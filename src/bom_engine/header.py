"""
Header location: which column holds the component code and which the qty.

Header text is the only semantically reliable anchor in an unstructured
document. For PDFs the anchor is the x-position of the matched header
fragments; for spreadsheets it is the column index of the matched cells.
Only spreadsheets get a positional fallback, since their column structure
is explicit and a wrong guess is cheap to spot.
"""

import logging

from src.bom_engine import constants as C
from src.bom_engine.types import Cell, ColumnLocator, Grid, Row
from src.bom_engine.utils import cell_to_number, cell_to_text, matches_keyword

logger = logging.getLogger(__name__)


def is_code_header(text: str) -> bool:
    return matches_keyword(text, C.CODE_KEYWORDS)


def is_qty_header(text: str) -> bool:
    return matches_keyword(text, C.QUANTITY_KEYWORDS)


def is_header_text(text: str) -> bool:
    """True if text carries any code or quantity header keyword."""
    return is_code_header(text) or is_qty_header(text)


def locate_pdf_columns(
    rows: list[Row], tolerance: float = C.HORIZONTAL_TOLERANCE
) -> ColumnLocator | None:
    """
    Finds the header row of a PDF table.

    Scans rows top-to-bottom; the first row holding both a code-keyword
    fragment and a (different) quantity-keyword fragment is the header.

    Args:
        rows: Reconstructed rows, top-to-bottom.
        tolerance: Horizontal tolerance stored in the locator for matching
            data cells to the header anchors.

    Returns:
        A ColumnLocator keyed by the x of the header fragments, or None if
        no row qualifies.
    """
    for idx, row in enumerate(rows):
        code_frag = next((f for f in row if is_code_header(f["text"])), None)
        qty_frag = next(
            (f for f in row if f is not code_frag and is_qty_header(f["text"])),
            None,
        )
        if code_frag is None or qty_frag is None:
            continue

        logger.debug(
            f"Header row {idx}: code '{code_frag['text']}' at x={code_frag['x']}, "
            f"qty '{qty_frag['text']}' at x={qty_frag['x']}"
        )
        return {
            "code_key": code_frag["x"],
            "qty_key": qty_frag["x"],
            "tolerance": tolerance,
            "header_index": idx,
            "from_header": True,
        }

    return None


def _find_header_in_row(row: list[Cell]) -> tuple[int | None, int | None]:
    code_idx = None
    qty_idx = None
    for col, cell in enumerate(row):
        text = cell_to_text(cell)
        if not text:
            continue
        if code_idx is None and is_code_header(text):
            code_idx = col
        elif qty_idx is None and is_qty_header(text):
            qty_idx = col
    return code_idx, qty_idx


def _numeric_candidate(
    row: list[Cell], code_col: int, preference: tuple[int, ...]
) -> int | None:
    for col in preference:
        if col == code_col or col >= len(row):
            continue
        value = cell_to_number(row[col])
        if value is not None and value > 0:
            return col
    return None


def guess_qty_column(
    grid: Grid,
    code_col: int = C.CODE_COLUMN_DEFAULT,
    preference: tuple[int, ...] = C.QTY_COLUMN_PREFERENCE,
    default: int = C.QTY_COLUMN_DEFAULT,
) -> int:
    """
    Picks a quantity column for a sheet without a recognizable header.

    The sample data row is the first row with a non-empty code cell and a
    clean positive number in one of the preferred columns, so an
    unrecognized header row is never mistaken for data. The first
    preferred column that is numeric in that row wins.

    Note:
        The preference list reflects one observed supplier template, not a
        general rule; it is a setting, not a guarantee.
    """
    for row in grid:
        if len(row) <= code_col or not cell_to_text(row[code_col]):
            continue
        col = _numeric_candidate(row, code_col, preference)
        if col is not None:
            return col

    return default


def locate_sheet_columns(
    grid: Grid,
    max_scan_rows: int = C.MAX_HEADER_SCAN_ROWS,
    preference: tuple[int, ...] = C.QTY_COLUMN_PREFERENCE,
) -> ColumnLocator:
    """
    Finds the code and quantity column indices of a spreadsheet.

    Scans up to `max_scan_rows` rows for a row where one cell matches a
    code keyword and another matches a quantity keyword. Without such a
    row, column 0 is assumed to be the code and the quantity column is
    guessed from a sample data row.

    Args:
        grid: Row-major cell grid.
        max_scan_rows: How many leading rows may hold the header.
        preference: Candidate quantity columns for the fallback.

    Returns:
        A ColumnLocator; data starts at `header_index + 1`.
    """
    for idx, row in enumerate(grid[:max_scan_rows]):
        code_idx, qty_idx = _find_header_in_row(row)
        if code_idx is not None and qty_idx is not None:
            logger.debug(f"Sheet header at row {idx}: code={code_idx}, qty={qty_idx}")
            return {
                "code_key": code_idx,
                "qty_key": qty_idx,
                "tolerance": 0.0,
                "header_index": idx,
                "from_header": True,
            }

    qty_col = guess_qty_column(grid, preference=preference)
    logger.info(
        f"No header found; assuming code in column {C.CODE_COLUMN_DEFAULT}, "
        f"qty in column {qty_col}"
    )
    return {
        "code_key": C.CODE_COLUMN_DEFAULT,
        "qty_key": qty_col,
        "tolerance": 0.0,
        "header_index": -1,
        "from_header": False,
    }
