import csv
import io
from typing import Any

from openpyxl import Workbook

from src.bom_engine import BomLine, ForecastLine, format_quantity, forecast_to_rows

QUOTE_FIELDS = [
    "Seko Code (Input)",
    "Status",
    "LF_WMS Code",
    "Description",
    "Supplier",
    "Supplier Part Number",
    "Cost (EUR)",
    "Lead Time",
]

FORECAST_FIELDS = ["Seko Code", "Description", "Total Qty", "Breakdown"]

BOM_FIELDS = ["Part Code", "Qty"]


def _rows_to_csv(rows: list[dict[str, Any]], fields: list[str]) -> bytes:
    csv_buf = io.StringIO()
    writer = csv.DictWriter(csv_buf, fieldnames=fields, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    # encode "utf-8-sig" to ensure Excel opens it correctly with special characters
    return csv_buf.getvalue().encode("utf-8-sig")


def _rows_to_xlsx(rows: list[dict[str, Any]], fields: list[str], title: str) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(fields)
    for row in rows:
        ws.append([row.get(f) for f in fields])

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def generate_quote_csv(rows: list[dict[str, Any]]) -> bytes:
    """
    Generates a CSV file for BOM quote results.

    Args:
        rows (list[dict]): Rows as produced by `quote_to_rows`.

    Returns:
        bytes: The CSV content encoded as utf-8-sig.
    """
    return _rows_to_csv(rows, QUOTE_FIELDS)


def generate_quote_xlsx(rows: list[dict[str, Any]]) -> bytes:
    """
    Generates an Excel workbook for BOM quote results.

    Costs stay numeric so they can be summed in Excel.
    """
    return _rows_to_xlsx(rows, QUOTE_FIELDS, "BOM Quote")


def generate_forecast_csv(lines: list[ForecastLine]) -> bytes:
    """
    Generates a CSV file for a forecast, one row per component code.

    Args:
        lines (list[ForecastLine]): The calculated forecast.

    Returns:
        bytes: The CSV content encoded as utf-8-sig.
    """
    return _rows_to_csv(forecast_to_rows(lines), FORECAST_FIELDS)


def generate_forecast_xlsx(lines: list[ForecastLine]) -> bytes:
    """
    Generates an Excel workbook for a forecast.

    The first sheet holds one row per component; the second sheet holds
    the per-product breakdown, one row per (component, product) pair.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Forecast"
    ws.append(["Seko Code", "Description", "Total Qty"])
    for line in lines:
        ws.append(
            [line["component_code"], line["description"], line["total_quantity"]]
        )

    detail = wb.create_sheet("Breakdown")
    detail.append(
        ["Seko Code", "Product", "Product Qty", "Qty per Unit", "Total for Product"]
    )
    for line in lines:
        for b in line["breakdown"]:
            detail.append(
                [
                    line["component_code"],
                    b["product_name"],
                    b["product_quantity"],
                    b["quantity_per_unit"],
                    b["total_for_product"],
                ]
            )

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def generate_bom_csv(bom: list[BomLine]) -> bytes:
    """
    Serializes a BOM with a standard "Part Code / Qty" header.

    The output re-imports through the spreadsheet extractor unchanged.
    """
    rows = [
        {"Part Code": line["component_code"], "Qty": format_quantity(line["quantity"])}
        for line in bom
    ]
    return _rows_to_csv(rows, BOM_FIELDS)
