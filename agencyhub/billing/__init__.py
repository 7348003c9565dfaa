from .catalog import Product, ProductCatalog, default_catalog
from .lifecycle import (
    INVOICE_LIFECYCLE,
    QUOTE_LIFECYCLE,
    DocumentLifecycle,
    InvalidTransition,
    LifecycleError,
    UnknownStatus,
)
from .numbering import generate_invoice_number, generate_quote_number
from .pricing import (
    DocumentTotals,
    LineItem,
    PricedLine,
    RecurringSplit,
    compute_recurring_split,
    compute_totals,
    line_total,
    price_line_item,
)

__all__ = [
    "Product",
    "ProductCatalog",
    "default_catalog",
    "DocumentLifecycle",
    "INVOICE_LIFECYCLE",
    "QUOTE_LIFECYCLE",
    "InvalidTransition",
    "LifecycleError",
    "UnknownStatus",
    "generate_invoice_number",
    "generate_quote_number",
    "DocumentTotals",
    "LineItem",
    "PricedLine",
    "RecurringSplit",
    "compute_recurring_split",
    "compute_totals",
    "line_total",
    "price_line_item",
]
