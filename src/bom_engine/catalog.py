"""
Component catalog: bulk import, search and lookup.

The catalog is a list of Component records, each carrying its suppliers.
Storage and editing are handled by the surrounding application; this module
only builds, searches and indexes the records.
"""

import copy
import csv
import io
import logging
import os
import uuid
from typing import Any

from src.bom_engine import constants as C
from src.bom_engine.errors import CatalogImportError
from src.bom_engine.types import Component, ComponentLookup, Supplier
from src.bom_engine.utils import cell_to_text, clean_code

logger = logging.getLogger(__name__)


def get_sample_components() -> list[Component]:
    """Returns a fresh copy of the seed catalog."""
    return copy.deepcopy(C.SAMPLE_COMPONENTS)  # type: ignore[return-value]


def _parse_cost(raw: Any) -> float:
    text = cell_to_text(raw).replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return 0.0


def read_import_rows(content: bytes, filename: str) -> list[dict[str, Any]]:
    """
    Reads a component import file into header-keyed row dicts.

    The first row holds the headers. Rows with no values are skipped.

    Raises:
        CatalogImportError: Unsupported format.
    """
    ext = os.path.splitext(filename)[1].lower()

    if ext in C.SPREADSHEET_EXTENSIONS:
        from openpyxl import load_workbook

        wb = load_workbook(io.BytesIO(content), data_only=True, read_only=True)
        try:
            values = [list(r) for r in wb.worksheets[0].iter_rows(values_only=True)]
        finally:
            wb.close()
    elif ext == ".csv":
        text = content.decode("utf-8-sig", errors="replace")
        values = [list(r) for r in csv.reader(io.StringIO(text))]
    else:
        raise CatalogImportError(
            f"Unsupported file type '{ext or 'unknown'}'. "
            "Supported: .csv, .xlsx, .xlsm (legacy .xls must be re-saved as .xlsx)."
        )

    if not values:
        return []

    headers = [cell_to_text(h) for h in values[0]]
    rows = []
    for raw in values[1:]:
        if not any(cell_to_text(v) for v in raw):
            continue
        rows.append({h: v for h, v in zip(headers, raw) if h})
    return rows


def import_components(rows: list[dict[str, Any]]) -> list[Component]:
    """
    Builds components from import rows, one supplier per row.

    Rows sharing a SEKO code are merged into a single component with one
    supplier each. Rows missing a required value are skipped.

    Args:
        rows: Header-keyed rows (see REQUIRED_IMPORT_HEADERS).

    Returns:
        The imported components, in order of first appearance.

    Raises:
        CatalogImportError: The file is empty or lacks required headers.
    """
    if not rows:
        raise CatalogImportError("The file is empty or contains no valid data.")

    headers = set(rows[0].keys())
    missing = [h for h in C.REQUIRED_IMPORT_HEADERS if h not in headers]
    if missing:
        raise CatalogImportError(
            f"Missing required headers in file: {', '.join(missing)}"
        )

    components: dict[str, Component] = {}

    for index, row in enumerate(rows):
        values = {h: cell_to_text(row.get(h)) for h in C.REQUIRED_IMPORT_HEADERS}
        if not all(values.values()):
            # +2: header row and 1-based numbering
            logger.warning(f"Row {index + 2}: missing required data, skipped.")
            continue

        seko = values["sekoCode"]
        if seko not in components:
            components[seko] = {
                "id": f"c_{seko}_{uuid.uuid4().hex[:8]}",
                "seko_code": seko,
                "asel_code": cell_to_text(row.get("aselCode")),
                "lf_wms_code": f"{C.LF_WMS_PREFIX}{seko}",
                "description": values["description"],
                "suppliers": [],
            }

        component = components[seko]
        supplier: Supplier = {
            "id": f"s_{component['id']}_{len(component['suppliers'])}",
            "name": values["supplierName"],
            "part_number": values["supplierPartNumber"],
            "cost": _parse_cost(row.get("cost")),
            "lead_time": values["leadTime"],
            "packaging": cell_to_text(row.get("packaging")),
        }
        component["suppliers"].append(supplier)

    return list(components.values())


def merge_components(
    catalog: list[Component], imported: list[Component]
) -> list[Component]:
    """
    Adds imported components to a catalog.

    An imported component replaces an existing one with the same SEKO code;
    new codes are appended.
    """
    by_code = {c["seko_code"]: i for i, c in enumerate(catalog)}
    merged = list(catalog)
    for comp in imported:
        idx = by_code.get(comp["seko_code"])
        if idx is None:
            by_code[comp["seko_code"]] = len(merged)
            merged.append(comp)
        else:
            merged[idx] = comp
    return merged


def search_components(catalog: list[Component], query: str) -> list[Component]:
    """
    Case-insensitive free-text search.

    Matches codes (SEKO, ASEL, LF_WMS), the description and supplier
    names/part numbers. An empty query returns the whole catalog.
    """
    q = query.strip().lower()
    if not q:
        return list(catalog)

    results = []
    for comp in catalog:
        haystack = [
            comp["seko_code"],
            comp["asel_code"],
            comp["lf_wms_code"],
            comp["description"],
        ]
        for sup in comp["suppliers"]:
            haystack.extend([sup["name"], sup["part_number"]])
        if any(q in str(h).lower() for h in haystack):
            results.append(comp)
    return results


def find_component(catalog: list[Component], code: str) -> Component | None:
    """Finds a component by SEKO code, ignoring leading zeros."""
    wanted = clean_code(code)
    if not wanted:
        return None
    for comp in catalog:
        if clean_code(comp["seko_code"]) == wanted:
            return comp
    return None


def build_component_lookup(catalog: list[Component]) -> ComponentLookup:
    """
    Returns a code -> description lookup over the catalog.

    Codes are compared after normalization, so "000514846" finds "514846".
    """
    index = {clean_code(c["seko_code"]): c["description"] for c in catalog}

    def lookup(code: str) -> str | None:
        return index.get(clean_code(code)) or None

    return lookup
