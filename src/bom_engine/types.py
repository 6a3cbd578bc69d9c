"""
Type definitions and shared data structures for the BOM engine.

This module contains the TypedDicts and type aliases used throughout the
extraction, catalog and forecast pipeline to ensure consistent data passing.
"""

from collections import UserDict
from typing import Callable, NotRequired, TypedDict

# Raw spreadsheet cell: text, number, or empty.
Cell = str | int | float | None

# Returns the description of a component code, or None if unknown.
ComponentLookup = Callable[[str], str | None]


class TextFragment(TypedDict):
    """
    A positioned piece of text from a PDF text layer.

    Attributes:
        text: The rendered text.
        x: Left edge, in PDF points.
        y: Vertical position; increases upward (PDF user space).
        width: Rendered width, in PDF points.
        page: 0-based page index the fragment came from.
    """

    text: str
    x: float
    y: float
    width: float
    page: NotRequired[int]


# A visual row: fragments (PDF) or cell values (spreadsheet).
Row = list[TextFragment]
Grid = list[list[Cell]]


class ColumnLocator(TypedDict):
    """
    Where the code and quantity columns live in a document.

    Attributes:
        code_key: x-coordinate (PDF) or column index (spreadsheet) of the code.
        qty_key: x-coordinate (PDF) or column index (spreadsheet) of the qty.
        tolerance: Proximity allowed when matching a cell to its column (PDF).
        header_index: Row index of the header; data starts right after it.
            -1 when the columns were guessed without a header.
        from_header: False if the locator comes from the positional fallback.
    """

    code_key: float
    qty_key: float
    tolerance: float
    header_index: int
    from_header: bool


class BomLine(TypedDict):
    component_code: str
    quantity: float


class Product(TypedDict):
    """A finished product and its Bill of Materials."""

    id: str
    code: str
    name: str
    bom: list[BomLine]


class ProductionPlanEntry(TypedDict):
    product_id: str
    quantity: float


class BreakdownEntry(TypedDict):
    product_name: str
    product_quantity: float
    quantity_per_unit: float
    total_for_product: float


class ForecastLine(TypedDict):
    """
    Aggregated demand for a single component code.

    Attributes:
        component_code: The SEKO code.
        description: Catalog description, or a placeholder for unknown codes.
        total_quantity: Sum of demand across all planned products.
        breakdown: Per-product contributions, in plan order.
    """

    component_code: str
    description: str
    total_quantity: float
    breakdown: list[BreakdownEntry]


class Supplier(TypedDict):
    id: str
    name: str
    part_number: str
    cost: float
    lead_time: str
    packaging: str


class Component(TypedDict):
    id: str
    seko_code: str
    asel_code: str
    lf_wms_code: str
    description: str
    suppliers: list[Supplier]


class QuoteResult(TypedDict):
    input_code: str
    status: str
    component: Component | None
    supplier: Supplier | None


class StatsDict(TypedDict):
    """
    Tracking metrics and errors for a single extraction session.

    Attributes:
        lines_read: Data rows/lines examined.
        parts_found: BOM lines emitted (after de-duplication).
        residuals: Rows that were rejected, in human-readable form.
        strategy: Name of the strategy that produced the BOM.
        seen_codes: Codes already emitted, to drop repeated rows.
        duplicates: Number of rows dropped as repeated codes.
        errors: Document-level failures.
    """

    lines_read: int
    parts_found: int
    residuals: list[str]
    strategy: str | None
    seen_codes: set[str]
    duplicates: int
    errors: list[str]


def create_empty_stats() -> StatsDict:
    """Factory function to return a fresh StatsDict."""
    return {
        "lines_read": 0,
        "parts_found": 0,
        "residuals": [],
        "strategy": None,
        "seen_codes": set(),
        "duplicates": 0,
        "errors": [],
    }


class Forecast(UserDict):
    """
    Accumulator for component demand, keyed by component code.

    Keys keep the order in which codes first appeared, which is the order
    forecast lines are reported in.
    """

    def __missing__(self, key: str) -> ForecastLine:
        """Default factory for new codes."""
        value: ForecastLine = {
            "component_code": key,
            "description": "",
            "total_quantity": 0.0,
            "breakdown": [],
        }
        self.data[key] = value
        return value

    def add_demand(
        self,
        code: str,
        product_name: str,
        product_quantity: float,
        quantity_per_unit: float,
    ) -> float:
        """
        Records the demand of one BOM line for one planned product.

        Args:
            code: The component code.
            product_name: Display name of the planned product.
            product_quantity: How many units of the product are planned.
            quantity_per_unit: BOM quantity of the component per unit.

        Returns:
            The quantity added for this product.
        """
        needed = quantity_per_unit * product_quantity
        line = self[code]
        line["total_quantity"] += needed
        line["breakdown"].append(
            {
                "product_name": product_name,
                "product_quantity": product_quantity,
                "quantity_per_unit": quantity_per_unit,
                "total_for_product": needed,
            }
        )
        return needed
