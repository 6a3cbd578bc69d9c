"""
Business logic for quoting and purchasing.

This module contains the sourcing logic, which includes:
- Quoting a pasted list of SEKO codes against the catalog.
- Picking the cheapest supplier for a component.
- Costing a forecast with the cheapest suppliers.
- Identifying suspicious rejected lines from extraction.
"""

from src.bom_engine import constants as C
from src.bom_engine.catalog import find_component
from src.bom_engine.header import is_header_text
from src.bom_engine.types import (
    Component,
    ForecastLine,
    QuoteResult,
    StatsDict,
    Supplier,
)


def split_code_list(raw_text: str) -> list[str]:
    """Splits pasted text into codes, one per line, dropping blank lines."""
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def quote_codes(codes: list[str], catalog: list[Component]) -> list[QuoteResult]:
    """
    Resolves codes against the catalog.

    Each found code yields one result per supplier (or a single result with
    no supplier when the component has none). Unknown codes yield a single
    "Not Found" result. Input order is preserved.

    Args:
        codes: SEKO codes as entered.
        catalog: The component catalog.

    Returns:
        A flat list of quote results.
    """
    results: list[QuoteResult] = []

    for code in codes:
        comp = find_component(catalog, code)
        if comp is None:
            results.append(
                {
                    "input_code": code,
                    "status": C.STATUS_NOT_FOUND,
                    "component": None,
                    "supplier": None,
                }
            )
            continue

        if not comp["suppliers"]:
            results.append(
                {
                    "input_code": code,
                    "status": C.STATUS_FOUND,
                    "component": comp,
                    "supplier": None,
                }
            )
            continue

        for sup in comp["suppliers"]:
            results.append(
                {
                    "input_code": code,
                    "status": C.STATUS_FOUND,
                    "component": comp,
                    "supplier": sup,
                }
            )

    return results


def quote_to_rows(results: list[QuoteResult]) -> list[dict[str, object]]:
    """Flattens quote results into the export/display column layout."""
    rows = []
    for res in results:
        comp = res["component"]
        sup = res["supplier"]
        if sup:
            supplier_name = sup["name"]
        elif res["status"] == C.STATUS_FOUND:
            supplier_name = "No supplier"
        else:
            supplier_name = ""

        rows.append(
            {
                "Seko Code (Input)": res["input_code"],
                "Status": res["status"],
                "LF_WMS Code": comp["lf_wms_code"] if comp else "",
                "Description": comp["description"] if comp else "",
                "Supplier": supplier_name,
                "Supplier Part Number": sup["part_number"] if sup else "",
                "Cost (EUR)": round(sup["cost"], 5) if sup else None,
                "Lead Time": sup["lead_time"] if sup else "",
            }
        )
    return rows


def get_cheapest_supplier(component: Component) -> Supplier | None:
    """Returns the supplier with the lowest unit cost, if any."""
    if not component["suppliers"]:
        return None
    return min(component["suppliers"], key=lambda s: s["cost"])


def cost_forecast(
    lines: list[ForecastLine], catalog: list[Component]
) -> tuple[list[dict[str, object]], float]:
    """
    Costs a forecast using the cheapest supplier of each component.

    Components that are unknown or have no supplier are listed with no
    cost and excluded from the total.

    Returns:
        A tuple of (per-line cost rows, grand total in EUR).
    """
    rows = []
    total = 0.0

    for line in lines:
        comp = find_component(catalog, line["component_code"])
        sup = get_cheapest_supplier(comp) if comp else None

        line_cost = None
        if sup:
            line_cost = round(sup["cost"] * line["total_quantity"], 5)
            total += line_cost

        rows.append(
            {
                "Seko Code": line["component_code"],
                "Total Qty": line["total_quantity"],
                "Supplier": sup["name"] if sup else "",
                "Unit Cost (EUR)": sup["cost"] if sup else None,
                "Line Cost (EUR)": line_cost,
            }
        )

    return rows, round(total, 5)


def get_residual_report(stats: StatsDict) -> list[str]:
    """
    Identifies potential BOM lines hidden in the extractor's rejected rows.

    Scans the residuals for rows that carry digits and are not header or
    title noise. Useful for spotting layouts the extractor misread.

    Args:
        stats: The statistics dictionary containing residuals.

    Returns:
        A list of suspicious rows that might require manual review.
    """
    suspicious: list[str] = []

    for line in stats["residuals"]:
        # Pass explicit rejections through
        if line.startswith(("Malformed quantity", "Empty code")):
            suspicious.append(line)
            continue

        if is_header_text(line):
            continue

        if any(c.isdigit() for c in line):
            suspicious.append(line)

    return suspicious
