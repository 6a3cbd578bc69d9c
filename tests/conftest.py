import logging

import pytest

# Silence noisy libraries so we can see our own debug logs
logging.getLogger("pdfminer").setLevel(logging.WARNING)
logging.getLogger("pdfplumber").setLevel(logging.WARNING)
logging.getLogger("PIL").setLevel(logging.WARNING)


def frag(text, x, y, width=30.0, page=0):
    """Builds a TextFragment dict."""
    return {"text": text, "x": float(x), "y": float(y), "width": width, "page": page}


@pytest.fixture
def make_table_pdf():
    """
    Returns a factory that renders table rows into a real PDF.

    Each page is a list of rows; each row is a list of (x_mm, text) cells.
    Rows are laid out 8mm apart, starting 30mm from the top.

    Returns:
        callable: pages -> PDF bytes.
    """
    from fpdf import FPDF

    def _make(pages):
        pdf = FPDF(unit="mm", format="A4")
        pdf.set_auto_page_break(auto=False)
        pdf.set_font("Helvetica", "", 10)
        for rows in pages:
            pdf.add_page()
            y = 30.0
            for row in rows:
                for x, text in row:
                    pdf.text(x, y, text)
                y += 8.0
        return bytes(pdf.output())

    return _make


@pytest.fixture
def sample_products():
    """Two products sharing component X."""
    return [
        {
            "id": "p1",
            "code": "P1",
            "name": "Board P1",
            "bom": [{"component_code": "X", "quantity": 2.0}],
        },
        {
            "id": "p2",
            "code": "P2",
            "name": "Board P2",
            "bom": [
                {"component_code": "X", "quantity": 1.0},
                {"component_code": "Y", "quantity": 5.0},
            ],
        },
    ]
