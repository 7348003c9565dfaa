# agencyhub/billing/catalog.py
"""
Product catalog: the sellable services with their default prices.

The catalog is plain immutable data. It is handed to the pricer as an
argument (and installed on the Flask app by ``create_app``) so callers and
tests can swap in their own product list.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Iterator

CATEGORY_CORE = "core"
CATEGORY_MONTHLY = "monthly"
CATEGORY_ADDON = "addon"
CATEGORIES = (CATEGORY_CORE, CATEGORY_MONTHLY, CATEGORY_ADDON)

PRICING_ONE_TIME = "one-time"
PRICING_RECURRING = "recurring"
PRICING_TYPES = (PRICING_ONE_TIME, PRICING_RECURRING)


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    category: str          # core | monthly | addon (display grouping only)
    pricing_type: str      # one-time | recurring
    unit_price: Decimal
    description: str = ""
    delivery_time: str | None = None
    features: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown product category: {self.category!r}")
        if self.pricing_type not in PRICING_TYPES:
            raise ValueError(f"Unknown pricing type: {self.pricing_type!r}")
        price = Decimal(str(self.unit_price))
        if price < 0:
            raise ValueError(f"Product {self.id!r} has a negative price")
        object.__setattr__(self, "unit_price", price)
        object.__setattr__(self, "features", tuple(self.features))

    @property
    def is_recurring(self) -> bool:
        return self.pricing_type == PRICING_RECURRING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "type": self.pricing_type,
            "price": float(self.unit_price),
            "description": self.description,
            "deliveryTime": self.delivery_time,
            "features": list(self.features),
        }


class ProductCatalog:
    """Read-only, ordered product lookup table."""

    def __init__(self, products: Iterable[Product]):
        self._products: tuple[Product, ...] = tuple(products)
        self._by_id: dict[str, Product] = {}
        for product in self._products:
            if product.id in self._by_id:
                raise ValueError(f"Duplicate product id in catalog: {product.id!r}")
            self._by_id[product.id] = product

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    def get_product_by_id(self, product_id: str | None) -> Product | None:
        if not product_id:
            return None
        return self._by_id.get(product_id)

    def get_products_by_category(self, category: str) -> list[Product]:
        return [p for p in self._products if p.category == category]

    def core_services(self) -> list[Product]:
        return self.get_products_by_category(CATEGORY_CORE)

    def monthly_services(self) -> list[Product]:
        return self.get_products_by_category(CATEGORY_MONTHLY)

    def add_ons(self) -> list[Product]:
        return self.get_products_by_category(CATEGORY_ADDON)

    def calculate_total(self, product_ids: Iterable[str]) -> dict[str, Decimal]:
        """Sum catalog prices for a bare selection of product ids.

        Unknown ids are skipped. Returns ``{"one_time": ..., "monthly": ...}``.
        """
        one_time = Decimal("0")
        monthly = Decimal("0")
        for product_id in product_ids:
            product = self.get_product_by_id(product_id)
            if product is None:
                continue
            if product.is_recurring:
                monthly += product.unit_price
            else:
                one_time += product.unit_price
        return {"one_time": one_time, "monthly": monthly}


# =========================================================
# Seed data
# =========================================================
DEFAULT_PRODUCTS: tuple[Product, ...] = (
    # Core services - one-time setup fees
    Product(
        id="website-template",
        name="Template Website",
        category=CATEGORY_CORE,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("1500"),
        description="Industry-specific website template with CMS backend",
        delivery_time="2-3 weeks",
        features=(
            "Pre-built pages (Home, About, Services, Contact)",
            "Industry-specific content placeholders",
            "Built-in contact forms",
            "Google Analytics integration",
            "Basic SEO setup",
            "Mobile responsive design",
        ),
    ),
    Product(
        id="chatbot-setup",
        name="AI Chatbot Setup",
        category=CATEGORY_CORE,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("800"),
        description="Pre-configured business chatbot with FAQ database",
        delivery_time="1-2 weeks",
        features=(
            "Business-type chatbot template",
            "Standard FAQ database",
            "Lead capture flows",
            "Appointment booking integration",
            "Handoff-to-human protocols",
        ),
    ),
    Product(
        id="local-seo-setup",
        name="Local SEO Setup",
        category=CATEGORY_CORE,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("1000"),
        description="Complete local SEO optimization and setup",
        delivery_time="2-3 weeks",
        features=(
            "Google My Business optimization",
            "Local citation submissions",
            "Review management system setup",
            "Local content optimization",
            "Monthly reporting dashboard",
        ),
    ),
    Product(
        id="analytics-dashboard",
        name="Business Analytics Dashboard",
        category=CATEGORY_CORE,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("600"),
        description="Custom analytics dashboard with business metrics",
        delivery_time="1-2 weeks",
        features=(
            "Google Analytics integration",
            "Custom KPI tracking",
            "Automated weekly reports",
        ),
    ),
    Product(
        id="email-automation",
        name="Email Automation Setup",
        category=CATEGORY_CORE,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("500"),
        description="Automated email workflows and sequences",
        delivery_time="1 week",
        features=(
            "Welcome sequences",
            "Lead nurturing workflows",
            "Newsletter templates",
        ),
    ),
    # Monthly services - recurring
    Product(
        id="website-maintenance",
        name="Website Maintenance",
        category=CATEGORY_MONTHLY,
        pricing_type=PRICING_RECURRING,
        unit_price=Decimal("99"),
        description="Monthly website updates, hosting, and maintenance",
        features=("Hosting", "Security updates", "Content updates"),
    ),
    Product(
        id="chatbot-management",
        name="Chatbot Management",
        category=CATEGORY_MONTHLY,
        pricing_type=PRICING_RECURRING,
        unit_price=Decimal("100"),
        description="Monthly chatbot optimization and management",
        features=("FAQ updates", "Conversation review", "Performance reports"),
    ),
    Product(
        id="seo-management",
        name="SEO Management",
        category=CATEGORY_MONTHLY,
        pricing_type=PRICING_RECURRING,
        unit_price=Decimal("300"),
        description="Ongoing SEO optimization and reporting",
        features=("Keyword tracking", "Content recommendations", "Monthly reports"),
    ),
    Product(
        id="dashboard-reports",
        name="Dashboard & Reports",
        category=CATEGORY_MONTHLY,
        pricing_type=PRICING_RECURRING,
        unit_price=Decimal("200"),
        description="Monthly analytics reports and dashboard management",
        features=("Monthly analytics review", "Dashboard upkeep"),
    ),
    Product(
        id="automation-management",
        name="Automation Management",
        category=CATEGORY_MONTHLY,
        pricing_type=PRICING_RECURRING,
        unit_price=Decimal("150"),
        description="Monthly automation workflow optimization",
        features=("Workflow tuning", "Deliverability monitoring"),
    ),
    # Add-ons
    Product(
        id="ecommerce-integration",
        name="E-commerce Integration",
        category=CATEGORY_ADDON,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("800"),
        description="Shopify/WooCommerce integration for online sales",
        delivery_time="1-2 weeks",
    ),
    Product(
        id="custom-design",
        name="Custom Design",
        category=CATEGORY_ADDON,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("500"),
        description="Custom design elements beyond template",
        delivery_time="1 week",
    ),
    Product(
        id="phone-integration",
        name="Phone Integration",
        category=CATEGORY_ADDON,
        pricing_type=PRICING_ONE_TIME,
        unit_price=Decimal("500"),
        description="Phone system integration for chatbots",
        delivery_time="1 week",
    ),
    Product(
        id="review-management",
        name="Review Management",
        category=CATEGORY_ADDON,
        pricing_type=PRICING_RECURRING,
        unit_price=Decimal("200"),
        description="Monthly review monitoring and management",
    ),
)


def default_catalog() -> ProductCatalog:
    return ProductCatalog(DEFAULT_PRODUCTS)
