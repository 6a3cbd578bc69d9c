"""
SEKO BOM Engine (Package Entry Point).

Exposes the core logic and data structures for BOM extraction, catalog
lookup, quoting and forecast aggregation.
"""

from .catalog import (
    build_component_lookup,
    find_component,
    get_sample_components,
    import_components,
    merge_components,
    read_import_rows,
    search_components,
)
from .errors import (
    CatalogImportError,
    ExtractionError,
    NoDataExtracted,
    NoHeaderFound,
    UnsupportedFormat,
)
from .header import locate_pdf_columns, locate_sheet_columns
from .layout import group_rows
from .loader import (
    extract_bom_from_document,
    process_input_data,
    read_pdf_fragments,
    read_sheet_grid,
)
from .manager import (
    calculate_forecast,
    forecast_to_rows,
    remove_product,
    upsert_product,
)
from .parser import (
    EXTRACTION_STRATEGIES,
    extract_bom_from_pdf,
    extract_bom_from_spreadsheet,
)
from .sourcing import (
    cost_forecast,
    get_cheapest_supplier,
    get_residual_report,
    quote_codes,
    quote_to_rows,
    split_code_list,
)
from .types import (
    BomLine,
    Component,
    ForecastLine,
    Product,
    ProductionPlanEntry,
    StatsDict,
    TextFragment,
    create_empty_stats,
)
from .utils import clean_code, format_quantity, parse_quantity

__all__ = [
    # types
    "BomLine",
    "Component",
    "ForecastLine",
    "Product",
    "ProductionPlanEntry",
    "StatsDict",
    "TextFragment",
    "create_empty_stats",
    # errors
    "CatalogImportError",
    "ExtractionError",
    "NoDataExtracted",
    "NoHeaderFound",
    "UnsupportedFormat",
    # extraction
    "group_rows",
    "locate_pdf_columns",
    "locate_sheet_columns",
    "EXTRACTION_STRATEGIES",
    "extract_bom_from_pdf",
    "extract_bom_from_spreadsheet",
    # loader
    "extract_bom_from_document",
    "process_input_data",
    "read_pdf_fragments",
    "read_sheet_grid",
    # manager
    "calculate_forecast",
    "forecast_to_rows",
    "remove_product",
    "upsert_product",
    # catalog
    "build_component_lookup",
    "find_component",
    "get_sample_components",
    "import_components",
    "merge_components",
    "read_import_rows",
    "search_components",
    # sourcing
    "cost_forecast",
    "get_cheapest_supplier",
    "get_residual_report",
    "quote_codes",
    "quote_to_rows",
    "split_code_list",
    # utils
    "clean_code",
    "format_quantity",
    "parse_quantity",
]
