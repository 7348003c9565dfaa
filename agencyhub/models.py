# agencyhub/models.py
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableList

from .billing.catalog import PRICING_ONE_TIME, PRICING_RECURRING, ProductCatalog
from .billing.lifecycle import INVOICE_DRAFT, QUOTE_DRAFT
from .billing.pricing import (
    ZERO,
    DocumentTotals,
    LineItem,
    RecurringSplit,
    compute_totals,
)
from .extensions import db


# Naive UTC everywhere: DB columns are "timestamp without time zone".
def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Full precision is stored; rounding to cents happens on display only.
Money = db.Numeric(14, 4, asdecimal=True)
Percent = db.Numeric(9, 4, asdecimal=True)


# =========================================================
# Client + contacts
# =========================================================
class Client(db.Model):
    __tablename__ = "client"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), nullable=False, index=True)
    website = db.Column(db.String(255), nullable=True)
    industry = db.Column(db.String(120), nullable=True)
    size = db.Column(db.String(60), nullable=True)
    status = db.Column(db.String(30), nullable=False, default="active")  # active|inactive|prospect

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    contacts = db.relationship(
        "Contact", back_populates="client", cascade="all, delete-orphan", order_by="Contact.id"
    )
    services = db.relationship(
        "Service", back_populates="client", cascade="all, delete-orphan", order_by="Service.id"
    )
    tickets = db.relationship(
        "Ticket", back_populates="client", cascade="all, delete-orphan", order_by="Ticket.id"
    )
    quotes = db.relationship("Quote", back_populates="client", cascade="all, delete-orphan")
    invoices = db.relationship("Invoice", back_populates="client", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Client {self.id} {self.name}>"


class Contact(db.Model):
    __tablename__ = "contact"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(
        db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client = db.relationship("Client", back_populates="contacts")

    name = db.Column(db.String(160), nullable=False)
    role = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(160), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    type = db.Column(db.String(30), nullable=False, default="primary")  # primary|technical|billing

    def __repr__(self) -> str:
        return f"<Contact {self.id} {self.name} ({self.type})>"


# =========================================================
# Service (a product delivered to a client)
# =========================================================
ticket_services = db.Table(
    "ticket_service",
    db.Column("ticket_id", db.Integer, db.ForeignKey("ticket.id", ondelete="CASCADE"), primary_key=True),
    db.Column("service_id", db.Integer, db.ForeignKey("service.id", ondelete="CASCADE"), primary_key=True),
)


class Service(db.Model):
    __tablename__ = "service"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(
        db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client = db.relationship("Client", back_populates="services")

    name = db.Column(db.String(160), nullable=False)
    type = db.Column(db.String(80), nullable=True)  # catalog product id
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(30), nullable=False, default="active")  # active|paused|cancelled

    cost_per_unit = db.Column(Money, nullable=True)
    custom_price = db.Column(Money, nullable=True)
    price_range_min = db.Column(Money, nullable=True)
    price_range_max = db.Column(Money, nullable=True)
    included = db.Column(db.Boolean, nullable=False, default=True)

    # Capacity tracking (units are service specific: GB, requests, seats...)
    capacity_limit = db.Column(db.Numeric(14, 2), nullable=True)
    current_usage = db.Column(db.Numeric(14, 2), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    tickets = db.relationship("Ticket", secondary=ticket_services, back_populates="services")
    resource_allocations = db.relationship(
        "ResourceAllocation",
        back_populates="service",
        cascade="all, delete-orphan",
        order_by="ResourceAllocation.timestamp.desc()",
    )

    def __repr__(self) -> str:
        return f"<Service {self.id} {self.name} client={self.client_id}>"


class ResourceAllocation(db.Model):
    """One reading of how much of a service's capacity a client holds and uses."""

    __tablename__ = "resource_allocation"

    id = db.Column(db.Integer, primary_key=True)
    service_id = db.Column(
        db.Integer, db.ForeignKey("service.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service = db.relationship("Service", back_populates="resource_allocations")

    client_id = db.Column(
        db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client = db.relationship("Client")

    allocated = db.Column(db.Numeric(14, 2), nullable=False)
    used = db.Column(db.Numeric(14, 2), nullable=False, default=Decimal("0"))
    cost = db.Column(Money, nullable=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow_naive, index=True)

    def __repr__(self) -> str:
        return f"<ResourceAllocation {self.id} service={self.service_id} {self.used}/{self.allocated}>"


# =========================================================
# Template library
# =========================================================
TEMPLATE_STATUSES = {"draft", "published", "deprecated"}


class Template(db.Model):
    __tablename__ = "template"
    __table_args__ = (
        db.CheckConstraint("status IN ('draft', 'published', 'deprecated')", name="ck_template_status"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(40), nullable=True)  # website|chatbot|dashboard|api
    version = db.Column(db.String(40), nullable=False, default="1.0.0")
    status = db.Column(db.String(20), nullable=False, default="draft")  # draft|published|deprecated
    author = db.Column(db.String(120), nullable=True)
    repository = db.Column(db.String(255), nullable=True)

    # Plain JSON on SQLite, JSONB on Postgres; MutableList tracks in-place appends.
    technologies = db.Column(
        MutableList.as_mutable(db.JSON().with_variant(JSONB(), "postgresql")),
        nullable=False,
        default=list,
    )
    usage_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    def __repr__(self) -> str:
        return f"<Template {self.id} {self.name} v{self.version}>"


# =========================================================
# Line items (abstract)
# =========================================================
class BaseLineItem(db.Model):
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    # Catalog product id, or a "custom:" reference for ad-hoc work
    product_id = db.Column(db.String(120), nullable=True)
    description = db.Column(db.String(255), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    # Inputs
    custom_price = db.Column(Money, nullable=True)
    discount = db.Column(Percent, nullable=True)

    # Derived by reprice(); never edited directly
    unit_price = db.Column(Money, nullable=False, default=Decimal("0"))
    total = db.Column(Money, nullable=False, default=Decimal("0"))
    pricing_type = db.Column(db.String(20), nullable=True)  # one-time|recurring|None (not in catalog)

    def as_line_item(self) -> LineItem:
        return LineItem(
            product_ref=self.product_id,
            quantity=self.quantity if self.quantity is not None else 1,
            custom_unit_price=self.custom_price,
            discount_percent=self.discount,
            description=self.description,
        )

    def copy_inputs(self) -> dict:
        return {
            "product_id": self.product_id,
            "description": self.description,
            "quantity": self.quantity,
            "custom_price": self.custom_price,
            "discount": self.discount,
        }


# =========================================================
# Billing document (abstract)
# =========================================================
class BillingDocumentMixin:
    """Shared totals handling for Quote and Invoice.

    ``subtotal``/``tax``/``total`` are a cache of the last pricing run and are
    rewritten by ``reprice`` in the same call that changes items or tax rate.
    """

    total_column = "total"

    def line_items(self) -> list[LineItem]:
        return [it.as_line_item() for it in self.items]

    def reprice(self, catalog: ProductCatalog) -> DocumentTotals:
        totals = compute_totals(self.line_items(), self.tax_rate, catalog)
        for row, priced in zip(self.items, totals.lines):
            row.unit_price = priced.base_price
            row.total = priced.line_total
            row.pricing_type = priced.pricing_type
            if not row.description and priced.product is not None:
                row.description = priced.product.name
        self.subtotal = totals.subtotal
        self.tax = totals.tax
        setattr(self, self.total_column, totals.total)
        return totals

    def recurring_split(self) -> RecurringSplit:
        """One-time vs monthly, summed from the line totals stored by the last reprice.

        Reading never consults the catalog, so the split always adds up with the
        stored subtotal even after catalog prices change.
        """
        one_time = ZERO
        monthly = ZERO
        for row in self.items:
            if row.pricing_type == PRICING_RECURRING:
                monthly += row.total or ZERO
            elif row.pricing_type == PRICING_ONE_TIME:
                one_time += row.total or ZERO
        return RecurringSplit(one_time=one_time, monthly=monthly)

    def monthly_amount(self) -> Decimal:
        return self.recurring_split().monthly

    def one_time_amount(self) -> Decimal:
        return self.recurring_split().one_time


# =========================================================
# Quote
# =========================================================
class Quote(BillingDocumentMixin, db.Model):
    __tablename__ = "quote"

    id = db.Column(db.Integer, primary_key=True)
    quote_number = db.Column(db.String(40), unique=True, nullable=False)

    client_id = db.Column(
        db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client = db.relationship("Client", back_populates="quotes")

    title = db.Column(db.String(200), nullable=False, default="")
    description = db.Column(db.Text, nullable=True)

    subtotal = db.Column(Money, nullable=False, default=Decimal("0"))
    tax_rate = db.Column(Percent, nullable=False, default=Decimal("0"))
    tax = db.Column(Money, nullable=False, default=Decimal("0"))
    total = db.Column(Money, nullable=False, default=Decimal("0"))

    status = db.Column(db.String(20), nullable=False, default=QUOTE_DRAFT, index=True)
    valid_until = db.Column(db.Date, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    items = db.relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.position",
    )

    def is_expired_on(self, day: date) -> bool:
        return bool(self.valid_until and self.valid_until < day)

    def __repr__(self) -> str:
        return f"<Quote {self.id} {self.quote_number} {self.status}>"


class QuoteItem(BaseLineItem):
    __tablename__ = "quote_item"

    quote_id = db.Column(
        db.Integer, db.ForeignKey("quote.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quote = db.relationship("Quote", back_populates="items")


# =========================================================
# Invoice
# =========================================================
INVOICE_TYPES = {"setup", "monthly", "custom"}


class Invoice(BillingDocumentMixin, db.Model):
    __tablename__ = "invoice"

    # Invoices call the grand total "amount".
    total_column = "amount"
    __table_args__ = (
        db.CheckConstraint("type IN ('setup', 'monthly', 'custom')", name="ck_invoice_type"),
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(40), unique=True, nullable=False)

    client_id = db.Column(
        db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client = db.relationship("Client", back_populates="invoices")

    source_quote_id = db.Column(
        db.Integer, db.ForeignKey("quote.id", ondelete="SET NULL"), nullable=True, index=True
    )
    source_quote = db.relationship("Quote", foreign_keys=[source_quote_id])

    title = db.Column(db.String(200), nullable=False, default="")
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(20), nullable=False, default="custom")  # setup|monthly|custom

    subtotal = db.Column(Money, nullable=False, default=Decimal("0"))
    tax_rate = db.Column(Percent, nullable=False, default=Decimal("0"))
    tax = db.Column(Money, nullable=False, default=Decimal("0"))
    amount = db.Column(Money, nullable=False, default=Decimal("0"))

    status = db.Column(db.String(20), nullable=False, default=INVOICE_DRAFT, index=True)
    issue_date = db.Column(db.Date, nullable=False, default=date.today)
    due_date = db.Column(db.Date, nullable=True)
    paid_date = db.Column(db.Date, nullable=True)
    payment_method = db.Column(db.String(40), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    items = db.relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
    )

    def is_past_due_on(self, day: date) -> bool:
        return bool(self.due_date and self.due_date < day)

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.invoice_number} {self.status}>"


class InvoiceItem(BaseLineItem):
    __tablename__ = "invoice_item"

    invoice_id = db.Column(
        db.Integer, db.ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False, index=True
    )
    invoice = db.relationship("Invoice", back_populates="items")


# =========================================================
# Support tickets
# =========================================================
TICKET_STATUSES = {"open", "in_progress", "resolved", "closed"}
TICKET_PRIORITIES = {"low", "medium", "high", "urgent"}


class Ticket(db.Model):
    __tablename__ = "ticket"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(
        db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client = db.relationship("Client", back_populates="tickets")

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="open", index=True)
    priority = db.Column(db.String(20), nullable=False, default="medium")
    type = db.Column(db.String(40), nullable=False)  # issue|maintenance|feature|question
    assignee = db.Column(db.String(120), nullable=True)
    impact = db.Column(db.String(255), nullable=True)
    scheduled_for = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive)

    services = db.relationship("Service", secondary=ticket_services, back_populates="tickets")

    def __repr__(self) -> str:
        return f"<Ticket {self.id} {self.status} {self.priority}>"


# =========================================================
# Activity feed
# =========================================================
class Activity(db.Model):
    __tablename__ = "activity"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(40), nullable=False, index=True)  # client|quote|invoice|ticket|service|template
    description = db.Column(db.String(500), nullable=False)
    user = db.Column(db.String(120), nullable=True)
    target = db.Column(db.String(160), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="success")  # success|warning|error

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive, index=True)

    def __repr__(self) -> str:
        return f"<Activity {self.id} {self.type} {self.status}>"
