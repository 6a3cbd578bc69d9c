import pytest
from hypothesis import given, strategies as st

from src.bom_engine import (
    build_component_lookup,
    calculate_forecast,
    forecast_to_rows,
    get_sample_components,
    remove_product,
    upsert_product,
)
from src.bom_engine.types import Forecast


def test_forecast_aggregates_shared_components(sample_products):
    """P1 x10 needs 2 X each; P2 x3 needs 1 X and 5 Y each."""
    plan = [
        {"product_id": "p1", "quantity": 10},
        {"product_id": "p2", "quantity": 3},
    ]

    lines = calculate_forecast(plan, sample_products)

    by_code = {line["component_code"]: line for line in lines}
    assert by_code["X"]["total_quantity"] == 23
    assert by_code["Y"]["total_quantity"] == 15

    breakdown = by_code["X"]["breakdown"]
    assert [b["product_name"] for b in breakdown] == ["Board P1", "Board P2"]
    assert [b["total_for_product"] for b in breakdown] == [20, 3]
    assert breakdown[0]["quantity_per_unit"] == 2.0
    assert breakdown[0]["product_quantity"] == 10


def test_forecast_keeps_first_appearance_order(sample_products):
    plan = [
        {"product_id": "p2", "quantity": 1},
        {"product_id": "p1", "quantity": 1},
    ]

    lines = calculate_forecast(plan, sample_products)

    assert [line["component_code"] for line in lines] == ["X", "Y"]
    assert [b["product_name"] for b in lines[0]["breakdown"]] == [
        "Board P2",
        "Board P1",
    ]


def test_forecast_is_repeatable(sample_products):
    plan = [{"product_id": "p1", "quantity": 4}]

    first = calculate_forecast(plan, sample_products)
    second = calculate_forecast(plan, sample_products)

    assert first == second
    # Inputs are untouched
    assert sample_products[0]["bom"] == [{"component_code": "X", "quantity": 2.0}]


def test_forecast_skips_zero_and_unknown_entries(sample_products):
    plan = [
        {"product_id": "p1", "quantity": 0},
        {"product_id": "ghost", "quantity": 5},
        {"product_id": "p2", "quantity": -1},
    ]

    assert calculate_forecast(plan, sample_products) == []
    assert calculate_forecast([], sample_products) == []


def test_forecast_descriptions_come_from_catalog():
    products = [
        {
            "id": "a",
            "code": "A",
            "name": "Board A",
            "bom": [
                {"component_code": "514846", "quantity": 2.0},
                {"component_code": "999999", "quantity": 1.0},
            ],
        }
    ]
    lookup = build_component_lookup(get_sample_components())

    lines = calculate_forecast([{"product_id": "a", "quantity": 1}], products, lookup)

    assert lines[0]["description"].startswith("Resistore 10k")
    assert lines[1]["description"] == "Description unavailable"


def test_forecast_without_lookup_uses_placeholder(sample_products):
    lines = calculate_forecast([{"product_id": "p1", "quantity": 1}], sample_products)
    assert lines[0]["description"] == "Description unavailable"


def test_forecast_to_rows(sample_products):
    plan = [
        {"product_id": "p1", "quantity": 10},
        {"product_id": "p2", "quantity": 3},
    ]

    rows = forecast_to_rows(calculate_forecast(plan, sample_products))

    assert rows[0] == {
        "Seko Code": "X",
        "Description": "Description unavailable",
        "Total Qty": "23",
        "Breakdown": "Board P1: 2 x 10 = 20; Board P2: 1 x 3 = 3",
    }


def test_forecast_accumulator_defaults():
    forecast = Forecast()

    added = forecast.add_demand("X", "Board", 3, 2.5)

    assert added == 7.5
    assert forecast["X"]["total_quantity"] == 7.5
    assert len(forecast["X"]["breakdown"]) == 1


# Product registry


def test_upsert_creates_then_replaces_bom():
    products = []

    created = upsert_product(
        products, "P1", "Board P1", [{"component_code": "X", "quantity": 2.0}]
    )
    updated = upsert_product(
        products, "P1", "Board P1 rev B", [{"component_code": "Z", "quantity": 1.0}]
    )

    assert len(products) == 1
    assert updated["id"] == created["id"]
    assert updated["name"] == "Board P1 rev B"
    # Replaced, not merged
    assert updated["bom"] == [{"component_code": "Z", "quantity": 1.0}]


def test_upsert_copies_the_bom():
    products = []
    bom = [{"component_code": "X", "quantity": 2.0}]

    product = upsert_product(products, "P1", "", bom)
    bom[0]["quantity"] = 99.0

    assert product["bom"][0]["quantity"] == 2.0
    # Blank name falls back to the code
    assert product["name"] == "P1"


def test_remove_product(sample_products):
    assert remove_product(sample_products, "p1") is True
    assert remove_product(sample_products, "p1") is False
    assert [p["id"] for p in sample_products] == ["p2"]


# 2. Property Testing


@given(
    st.integers(min_value=0, max_value=1000),
    st.integers(min_value=0, max_value=1000),
)
def test_forecast_total_is_sum_of_breakdown(n1, n2):
    products = [
        {"id": "p1", "code": "P1", "name": "P1", "bom": [{"component_code": "X", "quantity": 2.0}]},
        {
            "id": "p2",
            "code": "P2",
            "name": "P2",
            "bom": [
                {"component_code": "X", "quantity": 1.0},
                {"component_code": "Y", "quantity": 5.0},
            ],
        },
    ]
    plan = [{"product_id": "p1", "quantity": n1}, {"product_id": "p2", "quantity": n2}]

    lines = calculate_forecast(plan, products)

    for line in lines:
        assert line["total_quantity"] == pytest.approx(
            sum(b["total_for_product"] for b in line["breakdown"])
        )
        assert line["total_quantity"] > 0

    totals = {line["component_code"]: line["total_quantity"] for line in lines}
    if n1 or n2:
        assert totals["X"] == 2 * n1 + n2
    if n2:
        assert totals["Y"] == 5 * n2
