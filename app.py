from typing import Any

import streamlit as st

from src.bom_engine import (
    CatalogImportError,
    build_component_lookup,
    calculate_forecast,
    cost_forecast,
    forecast_to_rows,
    format_quantity,
    get_residual_report,
    get_sample_components,
    import_components,
    merge_components,
    process_input_data,
    quote_codes,
    quote_to_rows,
    read_import_rows,
    remove_product,
    search_components,
    split_code_list,
    upsert_product,
)
from src.bom_engine import constants as C
from src.exporters import (
    generate_bom_csv,
    generate_forecast_csv,
    generate_forecast_xlsx,
    generate_quote_csv,
    generate_quote_xlsx,
)
from src.report_generator import generate_forecast_pdf

STRATEGY_LABELS = {
    "Automatic": C.STRATEGY_AUTO,
    "Header columns": C.STRATEGY_COLUMNS,
    "Line scanning": C.STRATEGY_LINE_SCAN,
}

st.set_page_config(page_title="SEKO BOM Manager", page_icon="📦", layout="wide")

st.title("📦 SEKO BOM Manager")
st.markdown("""
**Components, quotes and production forecasts in one place.**

Upload a product BOM (PDF or spreadsheet) and the columns are detected for you.
Then plan a production run to see the total component demand.
""")

if "components" not in st.session_state:
    st.session_state.components = get_sample_components()
if "products" not in st.session_state:
    st.session_state.products = []
if "pending_bom" not in st.session_state:
    st.session_state.pending_bom = None
if "pending_stats" not in st.session_state:
    st.session_state.pending_stats = None
if "quote_results" not in st.session_state:
    st.session_state.quote_results = None
if "forecast" not in st.session_state:
    st.session_state.forecast = None


def component_rows(components: list[dict[str, Any]]) -> list[dict[str, Any]]:
    rows = []
    for comp in components:
        suppliers = comp["suppliers"]
        best = min((s["cost"] for s in suppliers), default=None)
        rows.append(
            {
                "Seko Code": comp["seko_code"],
                "ASEL Code": comp["asel_code"],
                "LF_WMS Code": comp["lf_wms_code"],
                "Description": comp["description"],
                "Suppliers": ", ".join(s["name"] for s in suppliers),
                "Best Cost (EUR)": best,
            }
        )
    return rows


tab_catalog, tab_quote, tab_products, tab_forecast = st.tabs(
    ["📋 Catalog", "💶 BOM Quote", "🧩 Products", "📈 Forecast"]
)

# --- Catalog ---
with tab_catalog:
    query = st.text_input(
        "Search", key="catalog_search", placeholder="Code, description, supplier..."
    )
    found = search_components(st.session_state.components, query)
    st.caption(f"{len(found)} of {len(st.session_state.components)} components")
    st.dataframe(component_rows(found))

    with st.expander("📥 Import components (CSV / Excel)"):
        st.caption(
            "Required columns: "
            + ", ".join(C.REQUIRED_IMPORT_HEADERS)
            + ". Optional: "
            + ", ".join(C.OPTIONAL_IMPORT_HEADERS)
            + "."
        )
        import_file = st.file_uploader(
            "Component file", type=["csv", "xlsx", "xlsm"], key="catalog_file"
        )
        if st.button("Import", key="catalog_import") and import_file:
            try:
                rows = read_import_rows(import_file.getvalue(), import_file.name)
                imported = import_components(rows)
                st.session_state.components = merge_components(
                    st.session_state.components, imported
                )
                st.toast(f"Imported {len(imported)} components", icon="📦")
                st.rerun()
            except CatalogImportError as e:
                st.error(f"Error while processing the file: {e}")

# --- BOM Quote ---
with tab_quote:
    codes_text = st.text_area(
        "Paste SEKO codes (one per line)",
        height=160,
        key="quote_input",
        placeholder="514846\n823301\n999999",
    )
    if st.button("🔍 Search", key="quote_submit", type="primary"):
        codes = split_code_list(codes_text)
        st.session_state.quote_results = quote_codes(
            codes, st.session_state.components
        )

    if st.session_state.quote_results is not None:
        quote_rows = quote_to_rows(st.session_state.quote_results)
        if quote_rows:
            st.dataframe(quote_rows)
            c1, c2 = st.columns(2)
            c1.download_button(
                "Export to Excel",
                data=generate_quote_xlsx(quote_rows),
                file_name="bom_quote.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
            c2.download_button(
                "Export to CSV",
                data=generate_quote_csv(quote_rows),
                file_name="bom_quote.csv",
                mime="text/csv",
            )
        else:
            st.info("No valid codes entered.")

# --- Products ---
with tab_products:
    st.subheader("1. Upload a BOM")
    c1, c2, c3 = st.columns([2, 3, 2])
    product_code = c1.text_input("Product Code", key="product_code")
    product_name = c2.text_input("Product Name", key="product_name")
    strategy_label = c3.selectbox(
        "PDF strategy", list(STRATEGY_LABELS), key="product_strategy"
    )

    method = st.radio(
        "Input Method",
        ["Upload File", "From URL"],
        key="product_method",
        horizontal=True,
    )
    if method == "Upload File":
        source = st.file_uploader(
            "BOM document",
            type=["pdf", "xlsx", "xlsm", "csv"],
            key="product_file",
        )
    else:
        source = st.text_input("BOM URL", key="product_url")

    if st.button("Extract BOM", key="product_extract"):
        bom, stats, _ = process_input_data(
            method,
            source,
            source_name=product_code or "Untitled Product",
            strategy=STRATEGY_LABELS[strategy_label],
        )
        st.session_state.pending_bom = bom
        st.session_state.pending_stats = stats

    pending = st.session_state.pending_bom
    pending_stats = st.session_state.pending_stats
    if pending_stats is not None:
        if pending_stats["errors"]:
            for err in pending_stats["errors"]:
                st.error(err)
        else:
            m1, m2, m3 = st.columns(3)
            m1.metric("Rows Scanned", pending_stats["lines_read"])
            m2.metric("Components Found", pending_stats["parts_found"])
            m3.metric("Strategy", pending_stats["strategy"] or "-")

            suspicious = get_residual_report(pending_stats)
            if suspicious:
                st.warning(f"⚠️ Skipped {len(suspicious)} rows that looked important:")
                with st.expander("Show skipped rows"):
                    for line in suspicious:
                        st.code(line)

            st.dataframe(
                [
                    {"Seko Code": b["component_code"], "Qty": b["quantity"]}
                    for b in pending
                ],
            )

            if st.button("✅ Confirm & Save", key="product_save", type="primary"):
                if not product_code.strip():
                    st.warning("Please enter a product code.")
                else:
                    upsert_product(
                        st.session_state.products, product_code, product_name, pending
                    )
                    st.session_state.pending_bom = None
                    st.session_state.pending_stats = None
                    st.toast("Product saved!", icon="🧩")
                    st.rerun()

    st.divider()
    st.subheader("2. Products")
    if not st.session_state.products:
        st.caption("No products yet.")
    lookup = build_component_lookup(st.session_state.components)
    for product in st.session_state.products:
        with st.expander(
            f"{product['code']} · {product['name']} ({len(product['bom'])} lines)"
        ):
            st.dataframe(
                [
                    {
                        "Seko Code": b["component_code"],
                        "Qty": format_quantity(b["quantity"]),
                        "Description": lookup(b["component_code"])
                        or C.DESCRIPTION_PLACEHOLDER,
                    }
                    for b in product["bom"]
                ],
            )
            d1, d2 = st.columns([4, 1])
            d1.download_button(
                "Download BOM (CSV)",
                data=generate_bom_csv(product["bom"]),
                file_name=f"{product['code']}_bom.csv",
                mime="text/csv",
                key=f"bom_dl_{product['id']}",
            )
            if d2.button("🗑️", key=f"del_{product['id']}"):
                remove_product(st.session_state.products, product["id"])
                st.rerun()

# --- Forecast ---
with tab_forecast:
    if not st.session_state.products:
        st.info("Add at least one product to plan a production run.")

    plan = []
    for product in st.session_state.products:
        qty = st.number_input(
            f"{product['code']} · {product['name']}",
            min_value=0,
            value=0,
            step=1,
            key=f"plan_{product['id']}",
        )
        plan.append({"product_id": product["id"], "quantity": qty})

    if st.button("Calculate Forecast", key="forecast_submit", type="primary"):
        st.session_state.forecast = calculate_forecast(
            plan,
            st.session_state.products,
            build_component_lookup(st.session_state.components),
        )
        st.session_state.forecast_plan = [
            (p["name"], e["quantity"])
            for p, e in zip(st.session_state.products, plan)
            if e["quantity"] > 0
        ]

    forecast = st.session_state.forecast
    if forecast is not None:
        if not forecast:
            st.info("Nothing to forecast: plan a positive quantity for a product.")
        else:
            st.dataframe(forecast_to_rows(forecast))

            cost_rows, total = cost_forecast(forecast, st.session_state.components)
            with st.expander(f"💶 Estimated cost: € {total:,.2f}"):
                st.dataframe(cost_rows)

            st.subheader("💾 Export")
            e1, e2, e3 = st.columns(3)
            e1.download_button(
                "Download CSV",
                data=generate_forecast_csv(forecast),
                file_name="forecast.csv",
                mime="text/csv",
            )
            e2.download_button(
                "Download Excel",
                data=generate_forecast_xlsx(forecast),
                file_name="forecast.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
            e3.download_button(
                "Download Picking List (PDF)",
                data=generate_forecast_pdf(
                    forecast, st.session_state.get("forecast_plan")
                ),
                file_name="forecast.pdf",
                mime="application/pdf",
            )
