# agencyhub/services/stats.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..billing.lifecycle import (
    INVOICE_CANCELLED,
    INVOICE_OVERDUE,
    INVOICE_PAID,
    INVOICE_SENT,
    QUOTE_ACCEPTED,
    QUOTE_SENT,
)
from ..billing.pricing import ZERO
from ..models import Invoice, Quote
from ..utils.serialize import iso_date, money


def _sum(invoices) -> Decimal:
    return sum((inv.amount or ZERO for inv in invoices), ZERO)


def _is_overdue(inv: Invoice, today: date) -> bool:
    if inv.status == INVOICE_OVERDUE:
        return True
    return inv.status == INVOICE_SENT and inv.is_past_due_on(today)


def billing_stats(client_id: int | None = None, today: date | None = None) -> dict:
    """Dashboard figures, optionally narrowed to one client."""
    today = today or date.today()

    inv_q = Invoice.query
    quote_q = Quote.query
    if client_id is not None:
        inv_q = inv_q.filter(Invoice.client_id == client_id)
        quote_q = quote_q.filter(Quote.client_id == client_id)

    invoices = inv_q.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
    quotes = quote_q.order_by(Quote.created_at.desc(), Quote.id.desc()).all()

    paid = [i for i in invoices if i.status == INVOICE_PAID]
    monthly = [i for i in invoices if i.type == "monthly" and i.status != INVOICE_CANCELLED]
    pending = [i for i in invoices if i.status == INVOICE_SENT]
    overdue = [i for i in invoices if _is_overdue(i, today)]

    sent_quotes = [q for q in quotes if q.status == QUOTE_SENT]
    accepted = [q for q in quotes if q.status == QUOTE_ACCEPTED]
    active = [q for q in sent_quotes if not q.valid_until or q.valid_until > today]

    conversion = (len(accepted) / len(sent_quotes) * 100) if sent_quotes else 0.0

    if client_id is not None:
        total_clients = 1
    else:
        total_clients = len({i.client_id for i in invoices} | {q.client_id for q in quotes})

    stats = {
        "totalRevenue": money(_sum(paid)),
        "monthlyRecurring": money(_sum(monthly)),
        "pendingInvoices": money(_sum(pending)),
        "overdueInvoices": money(_sum(overdue)),
        "activeQuotes": len(active),
        "conversionRate": round(conversion, 1),
        "totalClients": total_clients,
    }

    if client_id is not None:
        stats.update({
            "totalPaid": money(_sum(paid)),
            "pendingAmount": money(_sum(pending)),
            "recentQuotes": [
                {
                    "id": q.quote_number,
                    "amount": money(q.total),
                    "status": q.status,
                    "validUntil": iso_date(q.valid_until),
                }
                for q in quotes[:3]
            ],
            "recentInvoices": [
                {
                    "id": i.invoice_number,
                    "invoiceNumber": i.invoice_number,
                    "amount": money(i.amount),
                    "status": i.status,
                    "type": i.type,
                    "dueDate": iso_date(i.due_date),
                }
                for i in invoices[:3]
            ],
        })

    return stats
