import logging
from decimal import Decimal

from agencyhub.billing.pricing import (
    LineItem,
    compute_recurring_split,
    compute_tax,
    compute_totals,
    line_total,
    optional_decimal,
    price_line_item,
    round_money,
    to_decimal,
)


# --- Line items ---

def test_catalog_item_at_list_price(catalog):
    item = LineItem("website-template", quantity=1)
    assert line_total(item, catalog) == Decimal("1500")

    totals = compute_totals([item], 0, catalog)
    assert totals.subtotal == Decimal("1500")
    assert totals.tax == Decimal("0")
    assert totals.total == Decimal("1500")


def test_discount_applies_per_unit(catalog):
    priced = price_line_item(
        LineItem("website-maintenance", quantity=2, discount_percent=Decimal("10")), catalog
    )
    assert priced.base_price == Decimal("99")
    assert priced.effective_unit_price == Decimal("89.1")
    assert priced.line_total == Decimal("178.2")


def test_custom_price_wins_over_catalog(catalog):
    item = LineItem("website-template", quantity=2, custom_unit_price=Decimal("1200"))
    assert line_total(item, catalog) == Decimal("2400")


def test_zero_custom_price_is_honoured(catalog):
    item = LineItem("website-template", custom_unit_price=Decimal("0"))
    assert line_total(item, catalog) == Decimal("0")


def test_unknown_product_prices_at_zero_and_warns(catalog, caplog):
    item = LineItem("ghost-service", quantity=7)
    with caplog.at_level(logging.WARNING, logger="agencyhub.billing.pricing"):
        priced = price_line_item(item, catalog)

    assert priced.effective_unit_price == Decimal("0")
    assert priced.line_total == Decimal("0")
    assert priced.catalog_miss
    assert priced.zero_price_fallback
    assert "ghost-service" in caplog.text


def test_unknown_product_with_custom_price_is_not_a_fallback(catalog):
    priced = price_line_item(LineItem("ghost-service", custom_unit_price=Decimal("40")), catalog)
    assert priced.line_total == Decimal("40")
    assert priced.catalog_miss
    assert not priced.zero_price_fallback


def test_ad_hoc_item(catalog, caplog):
    item = LineItem("custom:logo-refresh", quantity=3, custom_unit_price=Decimal("250"))
    with caplog.at_level(logging.WARNING, logger="agencyhub.billing.pricing"):
        priced = price_line_item(item, catalog)
    assert priced.line_total == Decimal("750")
    assert not priced.catalog_miss
    assert caplog.text == ""


def test_quantity_is_not_validated(catalog):
    assert line_total(LineItem("chatbot-setup", quantity=0), catalog) == Decimal("0")
    assert line_total(LineItem("chatbot-setup", quantity=-1), catalog) == Decimal("-800")


def test_discount_over_hundred_goes_negative(catalog):
    item = LineItem("chatbot-setup", discount_percent=Decimal("150"))
    assert line_total(item, catalog) == Decimal("-400")


# --- Documents ---

def test_tax_on_subtotal(catalog):
    items = [LineItem("custom:work", custom_unit_price=Decimal("1000"))]
    totals = compute_totals(items, Decimal("8.5"), catalog)
    assert totals.subtotal == Decimal("1000")
    assert totals.tax == Decimal("85")
    assert totals.total == Decimal("1085")


def test_falsy_tax_rate_means_no_tax():
    assert compute_tax(Decimal("500"), None) == Decimal("0")
    assert compute_tax(Decimal("500"), "") == Decimal("0")
    assert compute_tax(Decimal("500"), "abc") == Decimal("0")
    assert compute_tax(Decimal("500"), 0) == Decimal("0")


def test_totals_track_item_changes(catalog):
    items = [LineItem("website-template")]
    before = compute_totals(items, 10, catalog)
    items.append(LineItem("chatbot-setup"))
    after = compute_totals(items, 10, catalog)
    assert before.total == Decimal("1650")
    assert after.total == Decimal("2530")


def test_unresolved_refs_reported(catalog):
    totals = compute_totals(
        [LineItem("website-template"), LineItem("ghost-service"), LineItem("custom:x")], 0, catalog
    )
    assert totals.unresolved_refs == ["ghost-service"]
    assert totals.subtotal == Decimal("1500")


def test_recurring_split(catalog):
    items = [LineItem("website-template"), LineItem("website-maintenance")]
    totals = compute_totals(items, 0, catalog)
    split = compute_recurring_split(items, catalog)
    assert totals.subtotal == Decimal("1599")
    assert split.monthly == Decimal("99")
    assert split.one_time == Decimal("1500")


def test_ad_hoc_items_are_in_neither_bucket(catalog):
    items = [
        LineItem("website-maintenance"),
        LineItem("custom:consulting", quantity=3, custom_unit_price=Decimal("250")),
        LineItem("ghost-service", custom_unit_price=Decimal("60")),
    ]
    split = compute_recurring_split(items, catalog)
    assert split.monthly == Decimal("99")
    assert split.one_time == Decimal("0")
    assert compute_totals(items, 0, catalog).subtotal == Decimal("909")


def test_injected_catalog_is_used(tiny_catalog):
    items = [LineItem("setup"), LineItem("hosting", quantity=3), LineItem("website-template")]
    totals = compute_totals(items, 0, tiny_catalog)
    assert totals.subtotal == Decimal("130")
    assert compute_recurring_split(items, tiny_catalog).monthly == Decimal("30")


# --- Coercion / rounding ---

def test_to_decimal_coercion():
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(9.9) == Decimal("9.9")
    assert to_decimal("") == Decimal("0")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("n/a") == Decimal("0")
    assert to_decimal("NaN") == Decimal("0")


def test_optional_decimal_keeps_missing_apart_from_zero():
    assert optional_decimal(None) is None
    assert optional_decimal("  ") is None
    assert optional_decimal(0) == Decimal("0")


def test_round_money_half_up():
    assert round_money(Decimal("178.205")) == Decimal("178.21")
    assert round_money(Decimal("0.004")) == Decimal("0.00")
