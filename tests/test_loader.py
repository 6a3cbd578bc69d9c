import io
from unittest.mock import MagicMock, patch

import pytest

from src.bom_engine import (
    UnsupportedFormat,
    create_empty_stats,
    extract_bom_from_document,
    process_input_data,
    read_pdf_fragments,
    read_sheet_grid,
)
from src.bom_engine.loader import detect_extension


# --- Helpers ---
class MockFile:
    """Fake uploaded file (name + getvalue)."""

    def __init__(self, name, content):
        self.name = name
        self.content = content if isinstance(content, bytes) else content.encode("utf-8")

    def getvalue(self):
        return self.content


TABLE = [
    [(10, "Part Code"), (50, "Description"), (120, "Q.ty")],
    [(10, "000514846"), (50, "Resistor 10k"), (121, "4")],
    [(10, "823301"), (50, "Capacitor 100n"), (120, "2,5")],
]


def xlsx_bytes(rows):
    from openpyxl import Workbook

    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# --- PDF ---


def test_pdf_fragments_have_positions(make_table_pdf):
    pages = read_pdf_fragments(make_table_pdf([TABLE]))

    assert len(pages) == 1
    texts = [f["text"] for f in pages[0]]
    # Multi-word labels stay whole
    assert "Part Code" in texts
    assert "Resistor 10k" in texts

    by_text = {f["text"]: f for f in pages[0]}
    # y grows upward: the header sits above the data
    assert by_text["Part Code"]["y"] > by_text["000514846"]["y"]
    assert abs(by_text["Part Code"]["x"] - by_text["000514846"]["x"]) < 1


def test_pdf_document_end_to_end(make_table_pdf):
    stats = create_empty_stats()

    bom = extract_bom_from_document(
        make_table_pdf([TABLE]), "board.pdf", stats=stats
    )

    assert bom == [
        {"component_code": "514846", "quantity": 4.0},
        {"component_code": "823301", "quantity": 2.5},
    ]
    assert stats["strategy"] == "columns"


def test_pdf_multi_page_document(make_table_pdf):
    page_two = [TABLE[0], [(10, "450012"), (50, "MCU"), (120, "1")]]

    bom = extract_bom_from_document(make_table_pdf([TABLE, page_two]), "board.pdf")

    assert [line["component_code"] for line in bom] == ["514846", "823301", "450012"]


def test_pdf_without_header_falls_back(make_table_pdf):
    pdf = make_table_pdf([[[(10, "Elenco"), (40, "E0255369"), (80, "Resistor")]]])
    stats = create_empty_stats()

    bom = extract_bom_from_document(pdf, "list.pdf", stats=stats)

    assert bom == [{"component_code": "E0255369", "quantity": 1.0}]
    assert stats["strategy"] == "line_scan"


def test_pdf_parser_catches_critical_errors():
    """
    A corrupt PDF is reported in stats['errors'] instead of crashing the app.
    """
    with patch("pdfplumber.open", side_effect=Exception("Simulated PDF Corruption")):
        bom, stats, content = process_input_data(
            "Upload File", MockFile("bom.pdf", b"%PDF-broken"), "CrashTest"
        )

    assert bom == []
    assert len(stats["errors"]) == 1
    assert "Simulated PDF Corruption" in stats["errors"][0]
    assert stats["parts_found"] == 0
    assert content == b"%PDF-broken"


# --- Spreadsheets ---


def test_xlsx_document():
    content = xlsx_bytes(
        [
            ["Distinta Base"],
            ["Codice", "Descrizione", "Quantità"],
            ["000514846", "Resistore", 4],
            [823301, "Condensatore", 2.5],
        ]
    )

    bom = extract_bom_from_document(content, "board.xlsx")

    assert bom == [
        {"component_code": "514846", "quantity": 4.0},
        {"component_code": "823301", "quantity": 2.5},
    ]


def test_csv_with_semicolons_and_decimal_commas():
    content = "Codice;Descrizione;Qtà\n000514846;Resistore;4\n823301;Condensatore;2,5\n"

    grid = read_sheet_grid(content.encode("utf-8"), ".csv")

    assert grid[1] == ["000514846", "Resistore", "4"]
    bom = extract_bom_from_document(content.encode("utf-8"), "board.csv")
    assert bom[1] == {"component_code": "823301", "quantity": 2.5}


def test_csv_empty_cells_become_none():
    grid = read_sheet_grid(b"Code,Qty,Note\n514846,2,\n", ".csv")
    assert grid[1] == ["514846", "2", None]


def test_unsupported_extension():
    with pytest.raises(UnsupportedFormat):
        extract_bom_from_document(b"hello", "board.docx")


@pytest.mark.parametrize(
    "filename, content, expected",
    [
        ("Board.PDF", b"", ".pdf"),
        ("download", b"%PDF-1.4", ".pdf"),
        ("download", b"PK\x03\x04", ".xlsx"),
        ("download", b"a;b", ".csv"),
    ],
)
def test_detect_extension(filename, content, expected):
    assert detect_extension(filename, content) == expected


# --- Input orchestration ---


def test_process_upload_happy_path():
    upload = MockFile("bom.csv", "Code,Qty\n000514846,4\n823301,2\n")

    bom, stats, content = process_input_data("Upload File", upload, "Upload")

    assert len(bom) == 2
    assert stats["errors"] == []
    assert stats["strategy"] == "spreadsheet"
    assert content.startswith(b"Code")


def test_process_upload_with_no_data_reports_message():
    upload = MockFile("bom.csv", "Code,Qty\n514846,abc\n")

    bom, stats, _ = process_input_data("Upload File", upload, "Upload")

    assert bom == []
    assert stats["errors"] == ["No valid components found."]


def test_process_unsupported_upload():
    bom, stats, _ = process_input_data("Upload File", MockFile("bom.docx", "x"), "Upload")

    assert bom == []
    assert "Unsupported file format" in stats["errors"][0]


def test_process_from_url():
    response = MagicMock()
    response.content = b"Code,Qty\n514846,3\n"
    response.raise_for_status.return_value = None

    with patch("requests.get", return_value=response) as mock_get:
        bom, stats, _ = process_input_data(
            "From URL", "https://example.com/files/bom.csv?dl=1", "URL"
        )

    mock_get.assert_called_once()
    assert bom == [{"component_code": "514846", "quantity": 3.0}]


def test_process_url_failure_is_reported():
    with patch("requests.get", side_effect=Exception("Connection refused")):
        bom, stats, content = process_input_data("From URL", "https://x/bom.pdf", "URL")

    assert bom == []
    assert content is None
    assert stats["errors"] == ["Connection refused"]


def test_process_empty_and_unknown_inputs():
    bom, stats, content = process_input_data("Upload File", None, "Nothing")
    assert (bom, stats["errors"], content) == ([], [], None)

    bom, stats, _ = process_input_data("Carrier Pigeon", "data", "Bird")
    assert stats["errors"] == ["Unknown Method"]
