"""
High-level product management and forecast aggregation.

This module acts as the "Controller" for the BOM engine. It handles:
- Product registry mutation (creating products, replacing their BOMs).
- Forecast aggregation (production plan x product BOMs -> component demand).
- Flattening forecasts into display/export rows.
"""

import uuid

from src.bom_engine import constants as C
from src.bom_engine.types import (
    BomLine,
    ComponentLookup,
    Forecast,
    ForecastLine,
    Product,
    ProductionPlanEntry,
)
from src.bom_engine.utils import format_quantity


def upsert_product(
    products: list[Product], code: str, name: str, bom: list[BomLine]
) -> Product:
    """
    Creates a product or replaces the BOM of an existing one.

    Products are matched by code. The BOM is wholly replaced, never merged,
    so re-uploading a document yields exactly the new extraction.

    Args:
        products: The product registry; mutated in place.
        code: Product code.
        name: Display name.
        bom: The confirmed BOM lines.

    Returns:
        The created or updated product.
    """
    code = code.strip()
    name = name.strip() or code
    bom_copy: list[BomLine] = [dict(line) for line in bom]  # type: ignore[misc]

    for product in products:
        if product["code"] == code:
            product["name"] = name
            product["bom"] = bom_copy
            return product

    product: Product = {
        "id": str(uuid.uuid4()),
        "code": code,
        "name": name,
        "bom": bom_copy,
    }
    products.append(product)
    return product


def remove_product(products: list[Product], product_id: str) -> bool:
    """Removes a product by id. Returns True if one was removed."""
    for i, product in enumerate(products):
        if product["id"] == product_id:
            products.pop(i)
            return True
    return False


def calculate_forecast(
    plan: list[ProductionPlanEntry],
    products: list[Product],
    lookup: ComponentLookup | None = None,
) -> list[ForecastLine]:
    """
    Aggregates component demand for a production plan.

    For every plan entry with a positive quantity and a known product, each
    BOM line contributes `line qty x planned qty` to its component code.

    Args:
        plan: Planned quantities per product id.
        products: The product registry.
        lookup: Optional description lookup; display enrichment only.

    Returns:
        One line per component code, in order of first appearance, each
        with a per-product breakdown in plan order. Empty for an empty or
        fully unresolvable plan.
    """
    by_id = {p["id"]: p for p in products}
    forecast = Forecast()

    for entry in plan:
        qty = entry["quantity"]
        product = by_id.get(entry["product_id"])
        if product is None or qty <= 0:
            continue

        for line in product["bom"]:
            forecast.add_demand(
                line["component_code"], product["name"], qty, line["quantity"]
            )

    lines: list[ForecastLine] = []
    for code, line in forecast.items():
        description = lookup(code) if lookup else None
        line["description"] = description or C.DESCRIPTION_PLACEHOLDER
        lines.append(line)

    return lines


def forecast_to_rows(lines: list[ForecastLine]) -> list[dict[str, str]]:
    """
    Flattens forecast lines into table rows for display and CSV export.

    The breakdown is condensed into one cell, e.g. "Board A: 2 x 10 = 20".
    """
    rows = []
    for line in lines:
        breakdown = "; ".join(
            f"{b['product_name']}: {format_quantity(b['quantity_per_unit'])} x "
            f"{format_quantity(b['product_quantity'])} = "
            f"{format_quantity(b['total_for_product'])}"
            for b in line["breakdown"]
        )
        rows.append(
            {
                "Seko Code": line["component_code"],
                "Description": line["description"],
                "Total Qty": format_quantity(line["total_quantity"]),
                "Breakdown": breakdown,
            }
        )
    return rows
