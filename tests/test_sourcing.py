from src.bom_engine import (
    cost_forecast,
    get_cheapest_supplier,
    get_residual_report,
    get_sample_components,
    quote_codes,
    quote_to_rows,
    split_code_list,
)
from src.bom_engine.types import create_empty_stats


def test_split_code_list_drops_blank_lines():
    assert split_code_list("514846\n\n  999999 \n") == ["514846", "999999"]
    assert split_code_list("") == []


def test_quote_expands_suppliers_and_flags_unknown_codes():
    catalog = get_sample_components()

    results = quote_codes(["514846", "999999"], catalog)

    assert [r["status"] for r in results] == ["Found", "Found", "Not Found"]
    assert [r["supplier"]["name"] for r in results[:2]] == ["Mouser", "Digi-Key"]
    assert results[2]["component"] is None
    assert results[2]["input_code"] == "999999"


def test_quote_keeps_input_code_as_typed():
    results = quote_codes(["000823301"], get_sample_components())

    assert len(results) == 1
    assert results[0]["input_code"] == "000823301"
    assert results[0]["component"]["seko_code"] == "823301"


def test_quote_component_without_suppliers():
    catalog = get_sample_components()
    catalog[1]["suppliers"] = []

    results = quote_codes(["823301"], catalog)
    rows = quote_to_rows(results)

    assert len(results) == 1
    assert results[0]["status"] == "Found"
    assert rows[0]["Supplier"] == "No supplier"
    assert rows[0]["Cost (EUR)"] is None


def test_quote_rows_layout():
    rows = quote_to_rows(quote_codes(["823301", "123"], get_sample_components()))

    assert rows[0] == {
        "Seko Code (Input)": "823301",
        "Status": "Found",
        "LF_WMS Code": "AS823301",
        "Description": "Condensatore Ceramico 100nF, 50V, X7R, SMD 0805",
        "Supplier": "Farnell",
        "Supplier Part Number": "FAR-CC0805-100N",
        "Cost (EUR)": 0.1,
        "Lead Time": "7 giorni",
    }
    assert rows[1]["Status"] == "Not Found"
    assert rows[1]["Supplier"] == ""
    assert rows[1]["LF_WMS Code"] == ""


def test_cheapest_supplier():
    catalog = get_sample_components()

    assert get_cheapest_supplier(catalog[0])["name"] == "Mouser"
    assert get_cheapest_supplier(catalog[2])["cost"] == 12.5

    catalog[1]["suppliers"] = []
    assert get_cheapest_supplier(catalog[1]) is None


def test_cost_forecast_excludes_unknown_components():
    lines = [
        {"component_code": "514846", "description": "", "total_quantity": 100.0, "breakdown": []},
        {"component_code": "450012", "description": "", "total_quantity": 2.0, "breakdown": []},
        {"component_code": "999999", "description": "", "total_quantity": 7.0, "breakdown": []},
    ]

    rows, total = cost_forecast(lines, get_sample_components())

    assert [r["Line Cost (EUR)"] for r in rows] == [5.0, 25.0, None]
    assert rows[2]["Supplier"] == ""
    assert total == 30.0


def test_residual_report_filters_noise():
    stats = create_empty_stats()
    stats["residuals"] = [
        "Part Code Description Q.ty",
        "Bill of Materials",
        "823301 Capacitor",
        "Malformed quantity for 514846: 'abc'",
        "Empty code: '000'",
    ]

    report = get_residual_report(stats)

    assert report == [
        "823301 Capacitor",
        "Malformed quantity for 514846: 'abc'",
        "Empty code: '000'",
    ]
