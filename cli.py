import csv
import logging
import os
import sys

from src.bom_engine import (
    calculate_forecast,
    create_empty_stats,
    extract_bom_from_document,
    get_residual_report,
    upsert_product,
)
from src.exporters import generate_forecast_csv
from src.report_generator import generate_forecast_pdf

BOM_EXTENSIONS = (".pdf", ".xlsx", ".xlsm", ".csv")
PLAN_FILE = "plan.csv"


def load_products(folder="data"):
    products = []

    if not os.path.exists(folder):
        print(f"❌ Missing folder: '{folder}'. Create it and drop your BOMs there.")
        sys.exit(1)

    files = sorted(
        f
        for f in os.listdir(folder)
        if f.lower().endswith(BOM_EXTENSIONS) and f != PLAN_FILE
    )

    if not files:
        print(f"⚠️  No BOM files in '{folder}'.")
        sys.exit(1)

    print(f"📂 Reading {len(files)} files from '{folder}'...")

    for filename in files:
        path = os.path.join(folder, filename)
        code = os.path.splitext(filename)[0]
        stats = create_empty_stats()
        try:
            with open(path, "rb") as f:
                bom = extract_bom_from_document(f.read(), filename, stats=stats)
        except Exception as e:
            print(f"   fail: {filename} ({e})")
            continue

        upsert_product(products, code, code, bom)
        print(f"   ok: {filename} ({len(bom)} lines via '{stats['strategy']}')")

        suspicious = get_residual_report(stats)
        for line in suspicious:
            print(f"      ? {line}")

    return products


def load_plan(products, folder="data"):
    """Reads data/plan.csv (product_code,quantity); defaults to 1 of each."""
    by_code = {p["code"]: p for p in products}
    path = os.path.join(folder, PLAN_FILE)

    if not os.path.exists(path):
        return [{"product_id": p["id"], "quantity": 1} for p in products]

    plan = []
    with open(path, encoding="utf-8-sig", newline="") as f:
        for row in csv.DictReader(f):
            product = by_code.get((row.get("product_code") or "").strip())
            if not product:
                continue
            try:
                qty = float(row.get("quantity") or 0)
            except ValueError:
                continue
            plan.append({"product_id": product["id"], "quantity": qty})
    return plan


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    # 1. Ingest
    products = load_products("data")
    if not products:
        print("❌ No BOM could be extracted.")
        sys.exit(1)

    # 2. Aggregate
    plan = load_plan(products, "data")
    forecast = calculate_forecast(plan, products)

    print("\n--- Forecast ---")
    print(f"Products: {len(products)} | Components: {len(forecast)}")

    # 3. Output
    out_dir = "output"
    os.makedirs(out_dir, exist_ok=True)

    csv_path = os.path.join(out_dir, "forecast.csv")
    pdf_path = os.path.join(out_dir, "forecast.pdf")

    by_id = {p["id"]: p for p in products}
    plan_rows = [
        (by_id[e["product_id"]]["name"], e["quantity"])
        for e in plan
        if e["quantity"] > 0
    ]

    try:
        with open(csv_path, "wb") as f:
            f.write(generate_forecast_csv(forecast))
        print(f"\n✅ CSV: {csv_path}")
    except PermissionError:
        print(f"\n❌ Error: Close {csv_path} first.")

    try:
        with open(pdf_path, "wb") as f:
            f.write(generate_forecast_pdf(forecast, plan_rows))
        print(f"✅ PDF: {pdf_path}")
    except PermissionError:
        print(f"\n❌ Error: Close {pdf_path} first.")

    print("\nDone.")
