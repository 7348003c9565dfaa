# agencyhub/utils/document_pdf.py

from __future__ import annotations

import io
from datetime import date, datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from ..billing.pricing import round_money, to_decimal
from ..config.company import company_context

# --- Brand colors ---
NAVY = colors.HexColor("#1e3a8a")
SKY = colors.HexColor("#38bdf8")
GRAY = colors.HexColor("#6b7280")
DARK = colors.HexColor("#111827")
LINE = colors.HexColor("#e5e7eb")


def _fmt_date(d):
    if not d:
        return "-"
    if isinstance(d, (datetime, date)):
        return d.strftime("%Y-%m-%d")
    return str(d)


def _money(v, currency="USD"):
    if v is None:
        return "-"
    return f"{currency} {round_money(v):,.2f}"


def _percent(v):
    d = to_decimal(v)
    if not d:
        return "-"
    return f"{d.normalize():f}%"


def _header(c, width, height, title: str, number: str, meta: str, company: dict) -> None:
    c.setFillColor(NAVY)
    c.rect(0, height - 28 * mm, width, 28 * mm, stroke=0, fill=1)

    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 16)
    c.drawString(18 * mm, height - 16 * mm, company["COMPANY_NAME"])

    c.setFont("Helvetica", 9)
    c.drawString(18 * mm, height - 22 * mm, company["COMPANY_TAGLINE"])

    c.setFont("Helvetica-Bold", 12)
    c.drawRightString(width - 18 * mm, height - 14 * mm, f"{title} {number}")

    c.setFont("Helvetica", 9)
    c.drawRightString(width - 18 * mm, height - 20 * mm, meta)


def _client_block(c, width, y, doc) -> float:
    client = getattr(doc, "client", None)
    name = getattr(client, "name", None) or "-"
    website = getattr(client, "website", None) or ""
    contacts = list(getattr(client, "contacts", None) or [])
    primary = next((ct for ct in contacts if ct.is_primary), contacts[0] if contacts else None)

    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(18 * mm, y, "Prepared For")
    c.drawString(width / 2 + 2 * mm, y, "Summary")
    y -= 6 * mm

    c.setStrokeColor(LINE)
    c.setFillColor(colors.white)
    c.roundRect(18 * mm, y - 26 * mm, (width / 2 - 22 * mm), 26 * mm, 6, stroke=1, fill=1)

    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(22 * mm, y - 8 * mm, name[:60])

    c.setFont("Helvetica", 9)
    line_y = y - 14 * mm
    if primary is not None:
        c.drawString(22 * mm, line_y, f"{primary.name} {('<' + primary.email + '>') if primary.email else ''}"[:75])
        line_y -= 5 * mm
    if website:
        c.setFillColor(GRAY)
        c.drawString(22 * mm, line_y, website[:75])
        c.setFillColor(DARK)

    right_x = width / 2 + 2 * mm
    c.setStrokeColor(LINE)
    c.setFillColor(colors.white)
    c.roundRect(right_x, y - 26 * mm, (width - right_x - 18 * mm), 26 * mm, 6, stroke=1, fill=1)

    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(right_x + 4 * mm, y - 8 * mm, (getattr(doc, "title", None) or "-")[:55])
    c.setFont("Helvetica", 9)
    c.setFillColor(GRAY)
    c.drawString(right_x + 4 * mm, y - 14 * mm, (getattr(doc, "description", None) or "")[:60])
    c.setFillColor(DARK)

    return y - 36 * mm


def _items_table(c, width, height, y, items, currency) -> float:
    data = [["Description", "Qty", "Unit Price", "Discount", "Line Total"]]
    for it in items:
        data.append([
            (it.description or it.product_id or "-")[:60],
            f"{it.quantity}",
            _money(it.unit_price, currency),
            _percent(it.discount),
            _money(it.total, currency),
        ])

    if len(data) == 1:
        data.append(["(No items)", "-", "-", "-", "-"])

    table = Table(
        data,
        colWidths=[78 * mm, 14 * mm, 30 * mm, 20 * mm, 32 * mm],
        hAlign="LEFT",
    )
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
        ("TEXTCOLOR", (0, 0), (-1, 0), DARK),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, LINE),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("PADDING", (0, 0), (-1, -1), 6),
    ]))

    tw, th = table.wrapOn(c, width - 36 * mm, height)
    if y - th < 60 * mm:
        c.showPage()
        y = height - 20 * mm
    table.drawOn(c, 18 * mm, y - th)
    return y - th - 10 * mm


def _totals_block(c, width, y, rows) -> float:
    block_x = width - 18 * mm
    for i, (label, value) in enumerate(rows):
        last = i == len(rows) - 1
        c.setFillColor(DARK if last else GRAY)
        c.setFont("Helvetica-Bold" if last else "Helvetica", 10 if last else 9)
        c.drawRightString(block_x, y, label)
        c.setFillColor(DARK)
        c.drawRightString(block_x - 40 * mm, y, value)
        y -= 6 * mm
    return y - 8 * mm


def _notes_and_terms(c, y, notes, terms) -> None:
    c.setFont("Helvetica-Bold", 10)
    c.setFillColor(DARK)
    c.drawString(18 * mm, y, "Terms")
    c.setFont("Helvetica", 9)
    c.setFillColor(GRAY)
    y -= 6 * mm
    for line in terms:
        c.drawString(18 * mm, y, line[:120])
        y -= 5 * mm

    if notes:
        y -= 4 * mm
        c.setFont("Helvetica-Bold", 10)
        c.setFillColor(DARK)
        c.drawString(18 * mm, y, "Notes")
        c.setFont("Helvetica", 9)
        c.setFillColor(GRAY)
        y -= 6 * mm
        for line in notes.splitlines()[:6]:
            c.drawString(18 * mm, y, line[:120])
            y -= 5 * mm


def _footer(c, width, company: dict) -> None:
    c.setFillColor(LINE)
    c.rect(0, 0, width, 12 * mm, stroke=0, fill=1)

    c.setFillColor(colors.HexColor("#374151"))
    c.setFont("Helvetica", 8)
    c.drawString(
        18 * mm, 4 * mm,
        f"{company['COMPANY_NAME']} • {company['COMPANY_EMAIL']} • {company['COMPANY_PHONE']} • {company['COMPANY_WEBSITE']}",
    )
    c.setFillColor(GRAY)
    c.drawRightString(width - 18 * mm, 4 * mm, f"Generated: {_fmt_date(date.today())}")


def render_quote_pdf(quote, currency: str = "USD") -> bytes:
    """
    Render a Quote PDF (NO DB writes).
    Returns PDF bytes.
    """
    company = company_context()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4

    meta = f"Status: {quote.status} • Valid until: {_fmt_date(quote.valid_until)}"
    _header(c, width, height, "PROPOSAL", quote.quote_number, meta, company)

    y = _client_block(c, width, height - 38 * mm, quote)
    y = _items_table(c, width, height, y, quote.items, currency)

    rows = [
        ("One-time", _money(quote.one_time_amount(), currency)),
        ("Monthly", _money(quote.monthly_amount(), currency)),
        ("Subtotal", _money(quote.subtotal, currency)),
        (f"Tax ({_percent(quote.tax_rate)})", _money(quote.tax, currency)),
        ("Total", _money(quote.total, currency)),
    ]
    y = _totals_block(c, width, y, rows)
    _notes_and_terms(c, y, quote.notes, company["QUOTE_TERMS"])
    _footer(c, width, company)

    c.showPage()
    c.save()

    pdf = buf.getvalue()
    buf.close()
    return pdf


def render_invoice_pdf(invoice, currency: str = "USD") -> bytes:
    """
    Render an Invoice PDF (NO DB writes).
    Returns PDF bytes.
    """
    company = company_context()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4

    meta = (
        f"Status: {invoice.status} • Issue: {_fmt_date(invoice.issue_date)}"
        f" • Due: {_fmt_date(invoice.due_date)}"
    )
    _header(c, width, height, "INVOICE", invoice.invoice_number, meta, company)

    y = _client_block(c, width, height - 38 * mm, invoice)
    y = _items_table(c, width, height, y, invoice.items, currency)

    rows = [
        ("Subtotal", _money(invoice.subtotal, currency)),
        (f"Tax ({_percent(invoice.tax_rate)})", _money(invoice.tax, currency)),
        ("Total", _money(invoice.amount, currency)),
    ]
    y = _totals_block(c, width, y, rows)

    terms = [company["INVOICE_TERMS"]]
    if invoice.paid_date:
        terms.append(f"Paid on {_fmt_date(invoice.paid_date)}"
                     + (f" via {invoice.payment_method}" if invoice.payment_method else ""))
    _notes_and_terms(c, y, invoice.notes, terms)
    _footer(c, width, company)

    c.showPage()
    c.save()

    pdf = buf.getvalue()
    buf.close()
    return pdf
