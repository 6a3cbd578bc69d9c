"""
Layout reconstruction for PDF text layers.

PDF text layers have no table structure: a page is just a bag of positioned
fragments, and columns may be separated by nothing more than rendered
whitespace. Rows are inferred purely from approximate vertical alignment.
"""

import logging

from src.bom_engine import constants as C
from src.bom_engine.types import Row, TextFragment

logger = logging.getLogger(__name__)


def _reading_order(fragment: TextFragment) -> tuple[int, float]:
    # Page first, then top-to-bottom (y grows upward in PDF space).
    return (fragment.get("page", 0), -fragment["y"])


def _close_row(row: Row) -> Row:
    return sorted(row, key=lambda f: f["x"])


def group_rows(
    fragments: list[TextFragment], tolerance: float = C.VERTICAL_TOLERANCE
) -> list[Row]:
    """
    Clusters positioned text fragments into visual rows.

    Fragments are walked top-to-bottom; a fragment joins the current row
    while its y is within `tolerance` of the y of the row's first fragment.
    Rows never span two pages.

    Args:
        fragments: Fragments from every page, in any order.
        tolerance: Max vertical distance (exclusive) to stay in the same row.

    Returns:
        Rows ordered top-to-bottom, each sorted left-to-right by x.
        An empty input yields an empty list.
    """
    rows: list[Row] = []
    current: Row = []
    row_y = 0.0
    row_page = 0

    for frag in sorted(fragments, key=_reading_order):
        page = frag.get("page", 0)
        if current and page == row_page and abs(frag["y"] - row_y) < tolerance:
            current.append(frag)
            continue

        if current:
            rows.append(_close_row(current))
        current = [frag]
        row_y = frag["y"]
        row_page = page

    if current:
        rows.append(_close_row(current))

    logger.debug(f"Grouped {len(fragments)} fragments into {len(rows)} rows")
    return rows


def flatten_pages(pages: list[list[TextFragment]]) -> list[TextFragment]:
    """
    Merges per-page fragment lists into one buffer, tagging each fragment
    with its page index.
    """
    merged: list[TextFragment] = []
    for page_idx, page in enumerate(pages):
        for frag in page:
            tagged: TextFragment = {**frag, "page": page_idx}
            merged.append(tagged)
    return merged


def row_text(row: Row) -> str:
    """Joins a row's fragments into a single line of text."""
    return " ".join(f["text"].strip() for f in row if f["text"].strip())
