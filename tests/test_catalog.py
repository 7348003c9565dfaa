from decimal import Decimal

import pytest

from agencyhub.billing.catalog import (
    CATEGORY_CORE,
    PRICING_ONE_TIME,
    Product,
    ProductCatalog,
    default_catalog,
)


# --- Seeded catalog ---

def test_default_catalog_has_fourteen_products():
    catalog = default_catalog()
    assert len(catalog) == 14
    assert len(catalog.core_services()) == 5
    assert len(catalog.monthly_services()) == 5
    assert len(catalog.add_ons()) == 4


def test_review_management_is_the_recurring_addon():
    recurring_addons = [p.id for p in default_catalog().add_ons() if p.is_recurring]
    assert recurring_addons == ["review-management"]


def test_lookup_by_id():
    catalog = default_catalog()
    product = catalog.get_product_by_id("website-template")
    assert product is not None
    assert product.unit_price == Decimal("1500")
    assert product.pricing_type == "one-time"
    assert catalog.get_product_by_id("website-maintenance").unit_price == Decimal("99")


def test_lookup_miss_returns_none():
    catalog = default_catalog()
    assert catalog.get_product_by_id("ghost-service") is None
    assert catalog.get_product_by_id("") is None
    assert catalog.get_product_by_id(None) is None


def test_category_listing_keeps_declaration_order():
    ids = [p.id for p in default_catalog().get_products_by_category("monthly")]
    assert ids == [
        "website-maintenance",
        "chatbot-management",
        "seo-management",
        "dashboard-reports",
        "automation-management",
    ]


def test_unknown_category_is_empty():
    assert default_catalog().get_products_by_category("enterprise") == []


def test_calculate_total_splits_by_pricing_type():
    totals = default_catalog().calculate_total(
        ["website-template", "website-maintenance", "review-management", "ghost-service"]
    )
    assert totals == {"one_time": Decimal("1500"), "monthly": Decimal("299")}


# --- Construction rules ---

def test_duplicate_ids_rejected():
    p = Product("a", "A", CATEGORY_CORE, PRICING_ONE_TIME, Decimal("1"))
    with pytest.raises(ValueError):
        ProductCatalog([p, p])


def test_negative_price_rejected():
    with pytest.raises(ValueError):
        Product("a", "A", CATEGORY_CORE, PRICING_ONE_TIME, Decimal("-1"))


def test_unknown_pricing_type_rejected():
    with pytest.raises(ValueError):
        Product("a", "A", CATEGORY_CORE, "weekly", Decimal("1"))


def test_products_are_immutable():
    product = default_catalog().get_product_by_id("chatbot-setup")
    with pytest.raises(AttributeError):
        product.unit_price = Decimal("1")


def test_to_dict_shape():
    data = default_catalog().get_product_by_id("seo-management").to_dict()
    assert data["id"] == "seo-management"
    assert data["type"] == "recurring"
    assert data["price"] == 300.0
    assert data["category"] == "monthly"
    assert isinstance(data["features"], list)
