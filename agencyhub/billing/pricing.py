# agencyhub/billing/pricing.py
"""
Line-item pricing and document totals.

Everything here is a pure function of its inputs: a catalog, the requested
items and a tax rate. Nothing is cached; callers recompute after every edit
to the items or the tax rate.

Arithmetic is done in ``Decimal`` without intermediate rounding. Rounding to
cents happens only when an amount is displayed (see ``round_money``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from .catalog import Product, ProductCatalog

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

# Ad-hoc items carry a reference with this prefix instead of a catalog id.
CUSTOM_ITEM_PREFIX = "custom:"


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a request value to Decimal; missing or garbage becomes ``default``.

    Floats go through ``str`` so 9.9 stays 9.9 rather than its binary
    approximation.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    try:
        s = str(value).strip()
        if not s:
            return default
        d = Decimal(s)
    except (InvalidOperation, TypeError, ValueError):
        return default
    return d if d.is_finite() else default


def optional_decimal(value: Any) -> Decimal | None:
    """Like ``to_decimal`` but keeps "not provided" distinguishable from 0."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    d = to_decimal(value, default=None)  # type: ignore[arg-type]
    return d


def round_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# =========================================================
# Types
# =========================================================
@dataclass(frozen=True)
class LineItem:
    product_ref: str | None
    quantity: int = 1
    custom_unit_price: Decimal | None = None
    discount_percent: Decimal | None = None
    description: str | None = None

    @property
    def is_custom(self) -> bool:
        return not self.product_ref or self.product_ref.startswith(CUSTOM_ITEM_PREFIX)


@dataclass(frozen=True)
class PricedLine:
    item: LineItem
    product: Product | None
    base_price: Decimal
    discount_amount: Decimal
    effective_unit_price: Decimal
    line_total: Decimal

    @property
    def catalog_miss(self) -> bool:
        """A catalog id was given but no product matched it."""
        return self.product is None and not self.item.is_custom

    @property
    def zero_price_fallback(self) -> bool:
        return self.catalog_miss and self.item.custom_unit_price is None

    @property
    def pricing_type(self) -> str | None:
        return self.product.pricing_type if self.product else None


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    lines: tuple[PricedLine, ...] = ()

    @property
    def unresolved_refs(self) -> list[str]:
        return [ln.item.product_ref for ln in self.lines if ln.zero_price_fallback]


@dataclass(frozen=True)
class RecurringSplit:
    one_time: Decimal
    monthly: Decimal


# =========================================================
# Line items
# =========================================================
def resolve_base_price(item: LineItem, catalog: ProductCatalog) -> tuple[Decimal, Product | None]:
    product = catalog.get_product_by_id(item.product_ref)
    if item.custom_unit_price is not None:
        return to_decimal(item.custom_unit_price), product
    if product is not None:
        return product.unit_price, product
    if not item.is_custom:
        logger.warning(
            "Unknown product %r priced at 0 (no custom price given)", item.product_ref
        )
    return ZERO, None


def price_line_item(item: LineItem, catalog: ProductCatalog) -> PricedLine:
    base_price, product = resolve_base_price(item, catalog)
    discount_amount = base_price * to_decimal(item.discount_percent) / HUNDRED
    effective = base_price - discount_amount
    # Quantity is not validated: zero or negative values flow straight through.
    total = effective * int(item.quantity)
    return PricedLine(
        item=item,
        product=product,
        base_price=base_price,
        discount_amount=discount_amount,
        effective_unit_price=effective,
        line_total=total,
    )


def line_total(item: LineItem, catalog: ProductCatalog) -> Decimal:
    return price_line_item(item, catalog).line_total


# =========================================================
# Documents
# =========================================================
def compute_tax(subtotal: Decimal, tax_rate: Any) -> Decimal:
    rate = to_decimal(tax_rate)
    if not rate:
        return ZERO
    return subtotal * rate / HUNDRED


def compute_totals(
    items: Iterable[LineItem],
    tax_rate: Any,
    catalog: ProductCatalog,
) -> DocumentTotals:
    lines = tuple(price_line_item(item, catalog) for item in items)
    subtotal = sum((ln.line_total for ln in lines), ZERO)
    tax = compute_tax(subtotal, tax_rate)
    return DocumentTotals(subtotal=subtotal, tax=tax, total=subtotal + tax, lines=lines)


def compute_recurring_split(items: Iterable[LineItem], catalog: ProductCatalog) -> RecurringSplit:
    """Partition line totals into one-time vs monthly by product pricing type.

    Items that do not resolve to a catalog product land in neither bucket.
    """
    one_time = ZERO
    monthly = ZERO
    for item in items:
        priced = price_line_item(item, catalog)
        if priced.product is None:
            continue
        if priced.product.is_recurring:
            monthly += priced.line_total
        else:
            one_time += priced.line_total
    return RecurringSplit(one_time=one_time, monthly=monthly)


def monthly_amount(items: Iterable[LineItem], catalog: ProductCatalog) -> Decimal:
    return compute_recurring_split(items, catalog).monthly
