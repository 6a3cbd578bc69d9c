"""
PDF Generation Engine.

This module handles the creation of printable forecast reports: a picking
list with one row per component (code, description, total quantity and a
checkbox) followed by the per-product breakdown.

It uses the `fpdf2` library to generate PDFs in memory.
"""

import datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from src.bom_engine import ForecastLine, format_quantity


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1.
    return text.encode("latin-1", errors="replace").decode("latin-1")


class ForecastReport(FPDF):
    """
    FPDF Subclass for generating the forecast picking list.

    Features:
        - Automatic pagination with the table header reprinted per page.
        - Custom header/footer.
    """

    def __init__(self, title: str = "Component Forecast"):
        super().__init__()
        self.report_title = title
        self.set_auto_page_break(auto=True, margin=15)
        self.set_title(title)

    def header(self):
        """Renders the header on every page."""
        self.set_font("Helvetica", "B", 10)
        self.cell(
            0,
            10,
            _latin1(self.report_title),
            align="R",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        self.line(10, 20, 200, 20)
        self.ln(6)

    def footer(self):
        """Renders the footer on every page."""
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")

    def draw_checkbox(self, x: float, y: float):
        """Draws a square checkbox at the specified coordinates."""
        self.rect(x, y, 4, 4)

    def _table_header(self):
        self.set_font("Helvetica", "B", 9)
        self.cell(10, 8, "Chk", 1)
        self.cell(30, 8, "Seko Code", 1)
        self.cell(25, 8, "Total Qty", 1, align="C")
        self.cell(0, 8, "Description", 1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font("Helvetica", "", 9)

    def add_plan_summary(self, plan_rows: list[tuple[str, float]]):
        """
        Lists the planned products and quantities above the table.

        Args:
            plan_rows (list[tuple]): (product name, planned quantity) pairs.
        """
        self.set_font("Helvetica", "", 9)
        date_str = datetime.datetime.now().strftime("%Y-%m-%d")
        self.cell(0, 6, f"Date: {date_str}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        for name, qty in plan_rows:
            self.cell(
                0,
                5,
                _latin1(f"- {name}: {format_quantity(qty)} pcs"),
                new_x=XPos.LMARGIN,
                new_y=YPos.NEXT,
            )
        self.ln(3)

    def add_forecast(self, lines: list[ForecastLine]):
        """
        Adds the picking table: one row per component code.

        Args:
            lines (list[ForecastLine]): The calculated forecast.
        """
        self._table_header()

        for line in lines:
            # Page Overflow Check: reprint the header on the new page.
            if self.get_y() + 8 > self.page_break_trigger:
                self.add_page()
                self._table_header()

            x = self.get_x()
            y = self.get_y()
            self.draw_checkbox(x + 3, y + 2)
            self.cell(10, 8, "", 1)

            self.cell(30, 8, _latin1(line["component_code"])[:18], 1)
            self.cell(25, 8, format_quantity(line["total_quantity"]), 1, align="C")

            desc = line["description"]
            if len(desc) > 70:
                desc = desc[:67] + "..."
            self.cell(0, 8, _latin1(desc), 1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def add_breakdown(self, lines: list[ForecastLine]):
        """Adds the per-product breakdown section."""
        self.ln(6)
        self.set_font("Helvetica", "B", 11)
        self.cell(0, 8, "Breakdown", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        for line in lines:
            self.set_font("Helvetica", "B", 9)
            self.cell(
                0,
                6,
                _latin1(
                    f"{line['component_code']} "
                    f"(total {format_quantity(line['total_quantity'])})"
                ),
                new_x=XPos.LMARGIN,
                new_y=YPos.NEXT,
            )
            self.set_font("Helvetica", "", 8)
            for b in line["breakdown"]:
                self.cell(
                    0,
                    5,
                    _latin1(
                        f"    {b['product_name']}: "
                        f"{format_quantity(b['quantity_per_unit'])} x "
                        f"{format_quantity(b['product_quantity'])} = "
                        f"{format_quantity(b['total_for_product'])}"
                    ),
                    new_x=XPos.LMARGIN,
                    new_y=YPos.NEXT,
                )


def generate_forecast_pdf(
    lines: list[ForecastLine], plan_rows: list[tuple[str, float]] | None = None
) -> bytes:
    """
    Renders a forecast as a printable PDF picking list.

    Args:
        lines (list[ForecastLine]): The calculated forecast.
        plan_rows (list[tuple]): Optional (product name, quantity) pairs.

    Returns:
        bytes: The binary content of the PDF.
    """
    pdf = ForecastReport()
    pdf.add_page()
    if plan_rows:
        pdf.add_plan_summary(plan_rows)
    pdf.add_forecast(lines)
    if lines:
        pdf.add_breakdown(lines)
    return bytes(pdf.output())
