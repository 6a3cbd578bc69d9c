"""
Input handling and decoding orchestration.

This module abstracts the source of a BOM document (uploaded file, URL)
and its binary format (PDF, XLSX, CSV) from the extraction logic. It owns
the decoders (pdfplumber for PDF text layers, openpyxl/csv for cell grids)
and is the boundary where document-level failures become user messages.
"""

import csv
import io
import logging
import os
from typing import Any, BinaryIO

import requests

from src.bom_engine import constants as C
from src.bom_engine.errors import ExtractionError, UnsupportedFormat
from src.bom_engine.parser import extract_bom_from_pdf, extract_bom_from_spreadsheet
from src.bom_engine.types import (
    BomLine,
    Grid,
    StatsDict,
    TextFragment,
    create_empty_stats,
)

logger = logging.getLogger(__name__)


def read_pdf_fragments(source: str | bytes | BinaryIO) -> list[list[TextFragment]]:
    """
    Decodes the text layer of every page of a PDF.

    Pages are decoded sequentially and fully before any row reconstruction
    happens. Words are extracted with blank characters kept, so multi-word
    labels ("Part Code") stay one fragment while table columns, which are
    separated by positioning rather than spaces, stay apart.

    Args:
        source: A file path, raw bytes, or a binary file object.

    Returns:
        One fragment list per page, with y measured upward from the page
        bottom (PDF user space).
    """
    # Lazy import to avoid loading heavy PDF libraries unless needed
    import pdfplumber

    if isinstance(source, bytes):
        source = io.BytesIO(source)

    pages: list[list[TextFragment]] = []
    with pdfplumber.open(source) as pdf:
        for page_idx, page in enumerate(pdf.pages):
            words = page.extract_words(keep_blank_chars=True) or []
            fragments: list[TextFragment] = []
            for w in words:
                text = str(w["text"]).strip()
                if not text:
                    continue
                fragments.append(
                    {
                        "text": text,
                        "x": float(w["x0"]),
                        "y": float(page.height) - float(w["bottom"]),
                        "width": float(w["x1"]) - float(w["x0"]),
                        "page": page_idx,
                    }
                )
            pages.append(fragments)

    logger.debug(f"Decoded {len(pages)} PDF pages")
    return pages


def _read_xlsx_grid(content: bytes) -> Grid:
    from openpyxl import load_workbook

    wb = load_workbook(io.BytesIO(content), data_only=True, read_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_delimited_grid(content: bytes) -> Grid:
    text = content.decode("utf-8-sig", errors="replace")
    sample = text[:4096]
    try:
        dialect: Any = csv.Sniffer().sniff(sample, delimiters=",;\t")
    except csv.Error:
        dialect = csv.excel

    grid: Grid = []
    for row in csv.reader(io.StringIO(text), dialect):
        grid.append([cell if cell.strip() else None for cell in row])
    return grid


def read_sheet_grid(content: bytes, ext: str) -> Grid:
    """
    Decodes a spreadsheet into a row-major grid of raw cell values.

    Args:
        content: File bytes.
        ext: Lowercase file extension, including the dot.

    Returns:
        The cell grid of the first sheet. Empty cells are None.

    Raises:
        UnsupportedFormat: For extensions other than xlsx/xlsm/csv/txt.
    """
    if ext in C.SPREADSHEET_EXTENSIONS:
        return _read_xlsx_grid(content)
    if ext in C.DELIMITED_EXTENSIONS:
        return _read_delimited_grid(content)
    raise UnsupportedFormat(f"Unsupported file format: '{ext or 'unknown'}'")


def detect_extension(filename: str, content: bytes) -> str:
    """
    Works out the document type from its name, falling back to magic bytes.
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext:
        return ext
    if content.startswith(b"%PDF"):
        return ".pdf"
    if content.startswith(b"PK"):
        return ".xlsx"
    return ".csv"


def extract_bom_from_document(
    content: bytes,
    filename: str,
    strategy: str = C.STRATEGY_AUTO,
    stats: StatsDict | None = None,
) -> list[BomLine]:
    """
    Decodes a document and extracts its BOM.

    Args:
        content: Raw document bytes.
        filename: Original file name (used for format detection).
        strategy: PDF extraction strategy; ignored for spreadsheets.
        stats: Optional stats object.

    Raises:
        ExtractionError: Any document-level extraction failure.
    """
    ext = detect_extension(filename, content)

    if ext in C.PDF_EXTENSIONS:
        pages = read_pdf_fragments(content)
        return extract_bom_from_pdf(pages, strategy=strategy, stats=stats)

    grid = read_sheet_grid(content, ext)
    return extract_bom_from_spreadsheet(grid, stats=stats)


def process_input_data(
    method: str,
    data: Any,
    source_name: str,
    strategy: str = C.STRATEGY_AUTO,
) -> tuple[list[BomLine], StatsDict, bytes | None]:
    """
    Unified handler for uploaded files and URLs.

    Extraction is all-or-nothing: on any failure the BOM is empty and the
    reason is in stats["errors"].

    Args:
        method: The input method ("Upload File" or "From URL").
        data: An uploaded file object (with .name/.getvalue()) or a URL.
        source_name: A display name for logging and error messages.
        strategy: PDF extraction strategy.

    Returns:
        A tuple containing:
            - list[BomLine]: The extracted BOM (empty on failure).
            - StatsDict: Extraction statistics and errors.
            - bytes | None: The raw document content, if it was read.
    """
    stats = create_empty_stats()

    # 1. Handle empty data case
    if not data:
        return [], stats, None

    content: bytes | None = None
    try:
        # A. URL
        if method == "From URL":
            url = str(data).strip()
            response = requests.get(url, timeout=C.URL_TIMEOUT_SECONDS)
            response.raise_for_status()
            content = response.content
            filename = url.split("?", 1)[0].rsplit("/", 1)[-1]

        # B. UPLOAD FILE
        elif method == "Upload File":
            if hasattr(data, "name"):
                filename = data.name
                content = data.getvalue()
            else:
                raise ValueError("Invalid file object provided.")

        else:
            stats["errors"].append("Unknown Method")
            return [], stats, None

        bom = extract_bom_from_document(content, filename, strategy, stats)
        logger.info(
            f"{source_name}: {stats['parts_found']} lines via '{stats['strategy']}'"
        )
        return bom, stats, content

    except ExtractionError as e:
        logger.warning(f"Extraction failed for {source_name}: {e}")
        stats["errors"].append(str(e))
    except Exception as e:
        logger.error(f"Error processing {source_name}: {e}")
        stats["errors"].append(str(e))

    return [], stats, content
