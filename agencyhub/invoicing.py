# agencyhub/invoicing.py
from __future__ import annotations

from flask import Blueprint, abort, current_app, jsonify, request

from .extensions import db, write_limit
from .models import Client, Invoice, Quote
from .services.documents import (
    convert_quote_to_invoice,
    create_invoice,
    create_quote,
    current_catalog,
    send_invoice,
    send_quote,
    set_invoice_status,
    set_quote_status,
    update_invoice,
    update_quote,
)
from .services.stats import billing_stats
from .utils.db import commit_or_rollback, get_or_none
from .utils.document_pdf import render_invoice_pdf, render_quote_pdf
from .utils.parsing import PayloadError, clean_str, filter_arg, json_body, parse_int
from .utils.serialize import invoice_to_dict, quote_to_dict

invoicing = Blueprint("invoicing", __name__, url_prefix="/api")


# =========================================================
# Helpers
# =========================================================
def _quote_or_404(number: str) -> Quote:
    quote = Quote.query.filter_by(quote_number=number).first()
    if quote is None:
        abort(404, description="Quote not found")
    return quote


def _invoice_or_404(number: str) -> Invoice:
    invoice = Invoice.query.filter_by(invoice_number=number).first()
    if invoice is None:
        abort(404, description="Invoice not found")
    return invoice


def _client_from_payload(data: dict) -> Client:
    client_id = parse_int(data.get("clientId"))
    if client_id is None:
        raise PayloadError("clientId is required")
    client = get_or_none(Client, client_id)
    if client is None:
        abort(404, description="Client not found")
    return client


def _client_filter() -> int | None:
    raw = request.args.get("clientId")
    client_id = parse_int(raw)
    if raw and client_id is None:
        raise PayloadError("clientId must be an integer")
    return client_id


def _pdf_response(pdf_bytes: bytes, filename: str):
    return current_app.response_class(
        pdf_bytes,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


# ======================
# Products
# ======================
@invoicing.route("/products", methods=["GET"])
def list_products():
    catalog = current_catalog()
    category = filter_arg("category")
    products = catalog.get_products_by_category(category) if category else list(catalog)
    return jsonify([p.to_dict() for p in products])


# ======================
# Quotes
# ======================
@invoicing.route("/quotes", methods=["GET"])
def list_quotes():
    q = Quote.query
    client_id = _client_filter()
    if client_id is not None:
        q = q.filter(Quote.client_id == client_id)
    status = filter_arg("status")
    if status:
        q = q.filter(Quote.status == status)

    quotes = q.order_by(Quote.created_at.desc(), Quote.id.desc()).all()
    return jsonify([quote_to_dict(quote) for quote in quotes])


@invoicing.route("/quotes", methods=["POST"])
@write_limit()
def create_quote_api():
    data = json_body()
    client = _client_from_payload(data)
    quote = create_quote(client, data)
    return jsonify(quote_to_dict(quote)), 201


@invoicing.route("/quotes/<string:number>", methods=["GET"])
def get_quote(number):
    quote = _quote_or_404(number)
    return jsonify(quote_to_dict(quote))


@invoicing.route("/quotes/<string:number>", methods=["PUT"])
@write_limit()
def update_quote_api(number):
    quote = _quote_or_404(number)
    update_quote(quote, json_body())
    if not commit_or_rollback("Update quote"):
        return jsonify({"error": "Failed to update quote"}), 500
    return jsonify(quote_to_dict(quote))


@invoicing.route("/quotes/<string:number>", methods=["DELETE"])
@write_limit()
def delete_quote(number):
    quote = _quote_or_404(number)
    db.session.delete(quote)
    if not commit_or_rollback("Delete quote"):
        return jsonify({"error": "Failed to delete quote"}), 500
    return jsonify({"success": True})


@invoicing.route("/quotes/<string:number>/send", methods=["POST"])
@write_limit()
def send_quote_api(number):
    quote = _quote_or_404(number)
    send_quote(quote)
    if not commit_or_rollback("Send quote"):
        return jsonify({"error": "Failed to send quote"}), 500
    return jsonify(quote_to_dict(quote))


@invoicing.route("/quotes/<string:number>/status", methods=["POST"])
@write_limit()
def quote_status(number):
    quote = _quote_or_404(number)
    data = json_body()
    set_quote_status(quote, clean_str(data.get("status")))
    if not commit_or_rollback("Update quote status"):
        return jsonify({"error": "Failed to update quote status"}), 500
    return jsonify(quote_to_dict(quote))


@invoicing.route("/quotes/<string:number>/convert", methods=["POST"])
@write_limit()
def convert_quote(number):
    quote = _quote_or_404(number)
    # Body is optional; when present it must be a JSON object.
    data = json_body() if request.get_data() else {}
    invoice = convert_quote_to_invoice(quote, data)
    return jsonify(invoice_to_dict(invoice)), 201


@invoicing.route("/quotes/<string:number>/pdf", methods=["GET"])
def quote_pdf(number):
    quote = _quote_or_404(number)
    pdf_bytes = render_quote_pdf(quote, current_app.config.get("CURRENCY", "USD"))
    return _pdf_response(pdf_bytes, f"Quote_{quote.quote_number}.pdf")


# ======================
# Invoices
# ======================
@invoicing.route("/invoices", methods=["GET"])
def list_invoices():
    q = Invoice.query
    client_id = _client_filter()
    if client_id is not None:
        q = q.filter(Invoice.client_id == client_id)
    status = filter_arg("status")
    if status:
        q = q.filter(Invoice.status == status)
    inv_type = filter_arg("type")
    if inv_type:
        q = q.filter(Invoice.type == inv_type)

    invoices = q.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
    return jsonify([invoice_to_dict(inv) for inv in invoices])


@invoicing.route("/invoices", methods=["POST"])
@write_limit()
def create_invoice_api():
    data = json_body()
    client = _client_from_payload(data)
    invoice = create_invoice(client, data)
    return jsonify(invoice_to_dict(invoice)), 201


@invoicing.route("/invoices/<string:number>", methods=["GET"])
def get_invoice(number):
    return jsonify(invoice_to_dict(_invoice_or_404(number)))


@invoicing.route("/invoices/<string:number>", methods=["PUT"])
@write_limit()
def update_invoice_api(number):
    invoice = _invoice_or_404(number)
    update_invoice(invoice, json_body())
    if not commit_or_rollback("Update invoice"):
        return jsonify({"error": "Failed to update invoice"}), 500
    return jsonify(invoice_to_dict(invoice))


@invoicing.route("/invoices/<string:number>", methods=["DELETE"])
@write_limit()
def delete_invoice(number):
    invoice = _invoice_or_404(number)
    db.session.delete(invoice)
    if not commit_or_rollback("Delete invoice"):
        return jsonify({"error": "Failed to delete invoice"}), 500
    return jsonify({"success": True})


@invoicing.route("/invoices/<string:number>/send", methods=["POST"])
@write_limit()
def send_invoice_api(number):
    invoice = _invoice_or_404(number)
    send_invoice(invoice)
    if not commit_or_rollback("Send invoice"):
        return jsonify({"error": "Failed to send invoice"}), 500
    return jsonify(invoice_to_dict(invoice))


@invoicing.route("/invoices/<string:number>/status", methods=["POST"])
@write_limit()
def invoice_status(number):
    invoice = _invoice_or_404(number)
    data = json_body()
    set_invoice_status(invoice, clean_str(data.get("status")), data)
    if not commit_or_rollback("Update invoice status"):
        return jsonify({"error": "Failed to update invoice status"}), 500
    return jsonify(invoice_to_dict(invoice))


@invoicing.route("/invoices/<string:number>/pdf", methods=["GET"])
def invoice_pdf(number):
    invoice = _invoice_or_404(number)
    pdf_bytes = render_invoice_pdf(invoice, current_app.config.get("CURRENCY", "USD"))
    return _pdf_response(pdf_bytes, f"Invoice_{invoice.invoice_number}.pdf")


# ======================
# Stats
# ======================
@invoicing.route("/billing/stats", methods=["GET"])
def stats():
    return jsonify(billing_stats(_client_filter()))
