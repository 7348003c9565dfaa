# agencyhub/services/documents.py
"""
Quote and invoice workflows on top of the pure billing core.

Every function here runs inside an app context: the product catalog, the
lifecycle policy and the numbering retry budget are read from the app so
tests can swap them per app.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..billing.catalog import ProductCatalog
from ..billing.lifecycle import (
    INVOICE_DRAFT,
    INVOICE_LIFECYCLE,
    INVOICE_OVERDUE,
    INVOICE_PAID,
    INVOICE_SENT,
    QUOTE_DRAFT,
    QUOTE_EXPIRED,
    QUOTE_LIFECYCLE,
    QUOTE_SENT,
    DocumentLifecycle,
)
from ..billing.numbering import generate_invoice_number, generate_quote_number
from ..billing.pricing import optional_decimal, to_decimal
from ..extensions import db
from ..models import INVOICE_TYPES, Client, Invoice, InvoiceItem, Quote, QuoteItem
from ..utils.parsing import PayloadError, clean_str, parse_date, parse_int
from .activity import record_activity

logger = logging.getLogger(__name__)

TITLE_MAXLEN = 200
DESCRIPTION_MAXLEN = 255
PRODUCT_REF_MAXLEN = 120
PAYMENT_METHOD_MAXLEN = 40


class NumberingConflict(RuntimeError):
    def __init__(self, document: str, attempts: int):
        super().__init__(f"Could not allocate a unique {document} number after {attempts} attempts")
        self.document = document
        self.attempts = attempts


# =========================================================
# App-bound collaborators
# =========================================================
def current_catalog() -> ProductCatalog:
    return current_app.extensions["product_catalog"]


def _strict() -> bool:
    return bool(current_app.config.get("STRICT_STATUS_TRANSITIONS", False))


def quote_lifecycle() -> DocumentLifecycle:
    return QUOTE_LIFECYCLE.with_strict(_strict())


def invoice_lifecycle() -> DocumentLifecycle:
    return INVOICE_LIFECYCLE.with_strict(_strict())


# =========================================================
# Payload helpers
# =========================================================
def parse_items(raw: Any) -> list[dict]:
    """Normalize the ``items`` array of a quote/invoice body.

    Quantity defaults to 1 but is otherwise taken as given (0 and negatives
    included). Discount and custom price stay ``None`` when not provided.
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PayloadError("items must be a list")

    rows = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise PayloadError(f"items[{idx}] must be an object")
        qty = parse_int(entry.get("quantity"))
        rows.append({
            "product_id": clean_str(entry.get("productId"), PRODUCT_REF_MAXLEN),
            "description": clean_str(entry.get("description"), DESCRIPTION_MAXLEN),
            "quantity": 1 if qty is None else qty,
            "custom_price": optional_decimal(entry.get("customPrice")),
            "discount": optional_decimal(entry.get("discount")),
        })
    return rows


def _build_rows(model, rows: list[dict]) -> list:
    return [model(position=i, **row) for i, row in enumerate(rows)]


def _default_tax_rate():
    return to_decimal(current_app.config.get("DEFAULT_TAX_RATE"))


def _insert_numbered(document: str, build: Callable[[int], Any]):
    """Add and commit a freshly numbered document, retrying on a number clash.

    ``build(attempt)`` must construct a brand-new object each time: a rollback
    discards everything pending in the session.
    """
    retries = max(1, int(current_app.config.get("DOCUMENT_NUMBER_RETRIES", 3)))
    for attempt in range(retries):
        doc = build(attempt)
        db.session.add(doc)
        try:
            db.session.commit()
            return doc
        except IntegrityError:
            db.session.rollback()
            logger.warning("%s number collision (attempt %d of %d)", document, attempt + 1, retries)

    raise NumberingConflict(document, retries)


# =========================================================
# Quotes
# =========================================================
def create_quote(client: Client, data: dict) -> Quote:
    catalog = current_catalog()
    status = quote_lifecycle().validate(None, clean_str(data.get("status")) or QUOTE_DRAFT)

    rows = parse_items(data.get("items"))
    tax_rate = to_decimal(data["taxRate"]) if "taxRate" in data else _default_tax_rate()
    valid_days = int(current_app.config.get("QUOTE_VALID_DAYS", 30))
    valid_until = parse_date(data.get("validUntil")) or date.today() + timedelta(days=valid_days)
    title = clean_str(data.get("title"), TITLE_MAXLEN) or f"Proposal for {client.name}"
    client_id = client.id

    def build(attempt: int) -> Quote:
        quote = Quote(
            quote_number=generate_quote_number(offset_ms=attempt),
            client_id=client_id,
            title=title,
            description=clean_str(data.get("description")),
            tax_rate=tax_rate,
            status=status,
            valid_until=valid_until,
            notes=clean_str(data.get("notes")),
            items=_build_rows(QuoteItem, rows),
        )
        quote.reprice(catalog)
        return quote

    quote = _insert_numbered("quote", build)
    record_activity(
        "quote",
        f"Quote {quote.quote_number} created for {quote.client.name}",
        target=quote.quote_number,
    )
    return quote


def update_quote(quote: Quote, data: dict) -> Quote:
    """Apply a PUT body. Totals are recomputed in the same call."""
    if "title" in data:
        quote.title = clean_str(data.get("title"), TITLE_MAXLEN) or quote.title
    if "description" in data:
        quote.description = clean_str(data.get("description"))
    if "notes" in data:
        quote.notes = clean_str(data.get("notes"))
    if "validUntil" in data:
        quote.valid_until = parse_date(data.get("validUntil")) or quote.valid_until
    if "taxRate" in data:
        quote.tax_rate = to_decimal(data.get("taxRate"))
    if "items" in data:
        quote.items = _build_rows(QuoteItem, parse_items(data.get("items")))

    status = clean_str(data.get("status"))
    previous = quote.status
    if status:
        quote.status = quote_lifecycle().validate(quote.status, status)

    quote.reprice(current_catalog())
    if status and quote.status != previous:
        _status_activity("quote", quote.quote_number, previous, quote.status)
    return quote


def set_quote_status(quote: Quote, target: str | None) -> Quote:
    if not target:
        raise PayloadError("status is required")
    previous = quote.status
    quote.status = quote_lifecycle().validate(previous, target)
    if quote.status != previous:
        _status_activity("quote", quote.quote_number, previous, quote.status)
    return quote


def send_quote(quote: Quote) -> Quote:
    return set_quote_status(quote, QUOTE_SENT)


# =========================================================
# Invoices
# =========================================================
def _invoice_type(value: Any, default: str = "custom") -> str:
    inv_type = clean_str(value) or default
    if inv_type not in INVOICE_TYPES:
        raise PayloadError(f"Invalid invoice type: {inv_type}")
    return inv_type


def _due_date(value: Any, issue_date: date) -> date:
    due_days = int(current_app.config.get("INVOICE_DUE_DAYS", 30))
    return parse_date(value) or issue_date + timedelta(days=due_days)


def create_invoice(client: Client, data: dict) -> Invoice:
    catalog = current_catalog()
    status = invoice_lifecycle().validate(None, clean_str(data.get("status")) or INVOICE_DRAFT)
    inv_type = _invoice_type(data.get("type"))

    rows = parse_items(data.get("items"))
    tax_rate = to_decimal(data["taxRate"]) if "taxRate" in data else _default_tax_rate()
    issue_date = date.today()
    due_date = _due_date(data.get("dueDate"), issue_date)
    title = clean_str(data.get("title"), TITLE_MAXLEN) or f"Invoice for {client.name}"
    client_id = client.id

    def build(attempt: int) -> Invoice:
        invoice = Invoice(
            invoice_number=generate_invoice_number(),
            client_id=client_id,
            title=title,
            description=clean_str(data.get("description")),
            type=inv_type,
            tax_rate=tax_rate,
            status=status,
            issue_date=issue_date,
            due_date=due_date,
            notes=clean_str(data.get("notes")),
            items=_build_rows(InvoiceItem, rows),
        )
        _stamp_payment(invoice, data)
        invoice.reprice(catalog)
        return invoice

    invoice = _insert_numbered("invoice", build)
    record_activity(
        "invoice",
        f"Invoice {invoice.invoice_number} created for {invoice.client.name}",
        target=invoice.invoice_number,
    )
    return invoice


def _stamp_payment(invoice: Invoice, data: dict) -> None:
    method = clean_str(data.get("paymentMethod"), PAYMENT_METHOD_MAXLEN)
    if method:
        invoice.payment_method = method
    paid_date = parse_date(data.get("paidDate"))
    if paid_date:
        invoice.paid_date = paid_date
    if invoice.status == INVOICE_PAID and invoice.paid_date is None:
        invoice.paid_date = date.today()


def update_invoice(invoice: Invoice, data: dict) -> Invoice:
    if "title" in data:
        invoice.title = clean_str(data.get("title"), TITLE_MAXLEN) or invoice.title
    if "description" in data:
        invoice.description = clean_str(data.get("description"))
    if "notes" in data:
        invoice.notes = clean_str(data.get("notes"))
    if "dueDate" in data:
        invoice.due_date = parse_date(data.get("dueDate")) or invoice.due_date
    if "type" in data:
        invoice.type = _invoice_type(data.get("type"), default=invoice.type)
    if "taxRate" in data:
        invoice.tax_rate = to_decimal(data.get("taxRate"))
    if "items" in data:
        invoice.items = _build_rows(InvoiceItem, parse_items(data.get("items")))

    status = clean_str(data.get("status"))
    previous = invoice.status
    if status:
        invoice.status = invoice_lifecycle().validate(invoice.status, status)
    _stamp_payment(invoice, data)

    invoice.reprice(current_catalog())
    if status and invoice.status != previous:
        _status_activity("invoice", invoice.invoice_number, previous, invoice.status)
    return invoice


def set_invoice_status(invoice: Invoice, target: str | None, data: dict | None = None) -> Invoice:
    if not target:
        raise PayloadError("status is required")
    previous = invoice.status
    invoice.status = invoice_lifecycle().validate(previous, target)
    _stamp_payment(invoice, data or {})
    if invoice.status != previous:
        _status_activity("invoice", invoice.invoice_number, previous, invoice.status)
    return invoice


def send_invoice(invoice: Invoice) -> Invoice:
    return set_invoice_status(invoice, INVOICE_SENT)


# =========================================================
# Quote -> Invoice
# =========================================================
def convert_quote_to_invoice(quote: Quote, data: dict | None = None) -> Invoice:
    """Create a draft invoice from a quote's items.

    The quote itself is left untouched; the invoice points back to it through
    ``source_quote_id``.
    """
    data = data or {}
    quote_lifecycle().check_conversion(quote.status)

    catalog = current_catalog()
    rows = [it.copy_inputs() for it in quote.items]
    quote_id = quote.id
    client_id = quote.client_id
    quote_number = quote.quote_number
    tax_rate = quote.tax_rate
    description = quote.description

    issue_date = date.today()
    title = clean_str(data.get("title"), TITLE_MAXLEN) or (quote.title or "").replace("Proposal", "Invoice")
    note = f"Converted from quote {quote_number} dated {issue_date.isoformat()}"
    notes = f"{quote.notes}\n\n{note}" if quote.notes else note
    inv_type = _invoice_type(data.get("type"))
    due_date = _due_date(data.get("dueDate"), issue_date)

    def build(attempt: int) -> Invoice:
        invoice = Invoice(
            invoice_number=generate_invoice_number(),
            client_id=client_id,
            source_quote_id=quote_id,
            title=title or f"Invoice for quote {quote_number}",
            description=description,
            type=inv_type,
            tax_rate=tax_rate,
            status=INVOICE_DRAFT,
            issue_date=issue_date,
            due_date=due_date,
            notes=notes,
            items=_build_rows(InvoiceItem, rows),
        )
        invoice.reprice(catalog)
        return invoice

    invoice = _insert_numbered("invoice", build)
    logger.info("Converted quote %s into invoice %s", quote_number, invoice.invoice_number)
    record_activity(
        "invoice",
        f"Quote {quote_number} converted to invoice {invoice.invoice_number}",
        target=invoice.invoice_number,
    )
    return invoice


# =========================================================
# Time-based status changes
# =========================================================
def sweep_overdue_and_expired(today: date | None = None) -> dict[str, list[str]]:
    """Move sent invoices past due to overdue and sent quotes past validity to expired.

    Returns the affected document numbers. The caller commits.
    """
    today = today or date.today()
    invoices = (
        Invoice.query
        .filter(Invoice.status == INVOICE_SENT, Invoice.due_date.isnot(None), Invoice.due_date < today)
        .order_by(Invoice.id.asc())
        .all()
    )
    quotes = (
        Quote.query
        .filter(Quote.status == QUOTE_SENT, Quote.valid_until.isnot(None), Quote.valid_until < today)
        .order_by(Quote.id.asc())
        .all()
    )

    inv_lc = invoice_lifecycle()
    quote_lc = quote_lifecycle()
    moved: dict[str, list[str]] = {"invoices": [], "quotes": []}

    for invoice in invoices:
        invoice.status = inv_lc.validate(invoice.status, INVOICE_OVERDUE)
        moved["invoices"].append(invoice.invoice_number)
    for quote in quotes:
        quote.status = quote_lc.validate(quote.status, QUOTE_EXPIRED)
        moved["quotes"].append(quote.quote_number)

    logger.info(
        "Billing sweep for %s: %d invoice(s) overdue, %d quote(s) expired",
        today.isoformat(), len(moved["invoices"]), len(moved["quotes"]),
    )
    return moved


def _status_activity(document: str, number: str, previous: str | None, current: str) -> None:
    record_activity(
        document,
        f"{document.capitalize()} {number} status changed from {previous} to {current}",
        target=number,
        commit=False,
    )
