"""
Utility functions for code normalization and numeric parsing.

This module handles the low-level cleaning logic, including:
- Component code normalization (000514846 -> 514846).
- Tolerant quantity parsing (4,5 -> 4.5; rejects 0, negatives, text).
- Typed coercion of spreadsheet cells (text, number, empty).
- Quantity formatting for exports (4.0 -> 4).
"""

import math
import re
from typing import Any

from src.bom_engine.types import Cell

_LEADING_ZEROS_RE = re.compile(r"^[0\s]+")
_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
_CLEAN_NUMBER_RE = re.compile(r"^[+]?\d+(?:[.,]\d+)?$")


def clean_code(raw: Any) -> str:
    """
    Normalizes a component code.

    Trims whitespace and strips every leading '0'. Already-clean codes pass
    through unchanged, and an all-zero code becomes an empty string (which
    the caller must reject).

    Args:
        raw: The raw code (string or spreadsheet number).

    Returns:
        The normalized code, e.g. "000514846" -> "514846".
    """
    if raw is None:
        return ""
    text = raw if isinstance(raw, str) else cell_to_text(raw)
    # Zeros padded with spaces ("00 514846") count as leading zeros too.
    return _LEADING_ZEROS_RE.sub("", text.strip())


def parse_quantity(raw: Any) -> float | None:
    """
    Parses a quantity string tolerant of decimal commas and stray characters.

    Commas become decimal points, everything outside [0-9.] is dropped, and
    the rest is parsed as a float. A minus sign before the first digit marks
    the value as negative.

    Args:
        raw: The raw quantity (e.g. "4,5", "2 pz", 3).

    Returns:
        The quantity (> 0), or None if the value is missing, non-numeric,
        zero or negative.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) and value > 0 else None

    text = str(raw).strip().replace(",", ".")
    first_digit = re.search(r"\d", text)
    if first_digit is None:
        return None
    if "-" in text[: first_digit.start()]:
        return None

    digits = _NON_NUMERIC_RE.sub("", text)
    try:
        value = float(digits)
    except ValueError:
        # e.g. "1.2.3" after stripping
        return None

    return value if math.isfinite(value) and value > 0 else None


def cell_to_text(cell: Cell) -> str:
    """
    Converts a spreadsheet cell to trimmed text.

    Integral floats render without a decimal part (514846.0 -> "514846"), so
    numeric code cells match their textual form.
    """
    if cell is None:
        return ""
    if isinstance(cell, float):
        if cell.is_integer():
            return str(int(cell))
        return repr(cell)
    return str(cell).strip()


def cell_to_number(cell: Cell) -> float | None:
    """
    Strictly converts a spreadsheet cell to a number.

    Unlike parse_quantity, text cells must be a clean number ("12", "4,5");
    anything with stray characters is not numeric.

    Returns:
        The float value, or None if the cell is empty or not a clean number.
    """
    if cell is None or isinstance(cell, bool):
        return None
    if isinstance(cell, (int, float)):
        return float(cell)

    text = str(cell).strip()
    if not _CLEAN_NUMBER_RE.match(text):
        return None
    return float(text.replace(",", "."))


def format_quantity(qty: float) -> str:
    """
    Renders a quantity for display and export.

    Always fixed-point, so small values never turn into "5e-05" (which
    parse_quantity would misread).

    Args:
        qty: The quantity (e.g. 4.0, 2.5, 0.00005).

    Returns:
        "4" for integral values, "2.5" otherwise (float noise beyond six
        decimals rounded away).
    """
    text = f"{float(qty):.6f}".rstrip("0").rstrip(".")
    return text or "0"


def matches_keyword(text: str, keywords: tuple[str, ...]) -> bool:
    """Case-insensitive substring match of any keyword in text."""
    lowered = text.lower().strip()
    if not lowered:
        return False
    return any(k in lowered for k in keywords)
