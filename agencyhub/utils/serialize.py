# agencyhub/utils/serialize.py
"""
JSON shapes returned by the API.

Keys follow the camelCase names the dashboard front end already consumes.
Money goes out as plain numbers; the front end formats currency itself.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any


def money(v: Any) -> float | None:
    if v is None:
        return None
    return float(v) if isinstance(v, Decimal) else float(v or 0)


def iso_date(d: date | datetime | None) -> str | None:
    if not d:
        return None
    if isinstance(d, datetime):
        return d.date().isoformat()
    return d.isoformat()


def iso_datetime(d: datetime | None) -> str | None:
    return d.isoformat() if d else None


def line_item_to_dict(item) -> dict:
    return {
        "productId": item.product_id,
        "description": item.description,
        "quantity": item.quantity,
        "unitPrice": money(item.unit_price),
        "customPrice": money(item.custom_price),
        "discount": money(item.discount),
        "total": money(item.total),
        "pricingType": item.pricing_type,
    }


# =========================================================
# Billing documents
# =========================================================
def quote_summary(quote) -> dict:
    return {
        "id": quote.quote_number,
        "clientId": quote.client_id,
        "clientName": quote.client.name if quote.client else None,
        "amount": money(quote.total),
        "status": quote.status,
        "validUntil": iso_date(quote.valid_until),
        "createdAt": iso_date(quote.created_at),
    }


def quote_to_dict(quote) -> dict:
    data = quote_summary(quote)
    data.update({
        "title": quote.title,
        "description": quote.description,
        "subtotal": money(quote.subtotal),
        "tax": money(quote.tax),
        "taxRate": money(quote.tax_rate),
        "total": money(quote.total),
        "monthlyAmount": money(quote.monthly_amount()),
        "oneTimeAmount": money(quote.one_time_amount()),
        "notes": quote.notes,
        "updatedAt": iso_datetime(quote.updated_at),
        "items": [line_item_to_dict(it) for it in quote.items],
    })
    return data


def invoice_summary(invoice) -> dict:
    return {
        "id": invoice.invoice_number,
        "invoiceNumber": invoice.invoice_number,
        "clientId": invoice.client_id,
        "clientName": invoice.client.name if invoice.client else None,
        "amount": money(invoice.amount),
        "status": invoice.status,
        "type": invoice.type,
        "dueDate": iso_date(invoice.due_date),
        "issueDate": iso_date(invoice.issue_date),
    }


def invoice_to_dict(invoice) -> dict:
    data = invoice_summary(invoice)
    data.update({
        "title": invoice.title,
        "description": invoice.description,
        "subtotal": money(invoice.subtotal),
        "tax": money(invoice.tax),
        "taxRate": money(invoice.tax_rate),
        "paidDate": iso_date(invoice.paid_date),
        "paymentMethod": invoice.payment_method,
        "notes": invoice.notes,
        "sourceQuoteId": invoice.source_quote.quote_number if invoice.source_quote else None,
        "createdAt": iso_datetime(invoice.created_at),
        "items": [line_item_to_dict(it) for it in invoice.items],
    })
    return data


# =========================================================
# Clients / services / tickets / activity
# =========================================================
def contact_to_dict(contact) -> dict:
    return {
        "id": contact.id,
        "clientId": contact.client_id,
        "name": contact.name,
        "role": contact.role,
        "email": contact.email,
        "phone": contact.phone,
        "isPrimary": bool(contact.is_primary),
        "type": contact.type,
    }


def service_to_dict(service, include_client: bool = False) -> dict:
    data = {
        "id": service.id,
        "clientId": service.client_id,
        "name": service.name,
        "type": service.type,
        "description": service.description,
        "status": service.status,
        "costPerUnit": money(service.cost_per_unit),
        "customPrice": money(service.custom_price),
        "priceRangeMin": money(service.price_range_min),
        "priceRangeMax": money(service.price_range_max),
        "included": bool(service.included),
        "capacityLimit": money(service.capacity_limit),
        "currentUsage": money(service.current_usage),
        "createdAt": iso_datetime(service.created_at),
        "updatedAt": iso_datetime(service.updated_at),
    }
    if include_client and service.client is not None:
        data["client"] = {"id": service.client.id, "name": service.client.name}
    return data


def ticket_to_dict(ticket) -> dict:
    return {
        "id": str(ticket.id),
        "title": ticket.title,
        "description": ticket.description,
        "status": ticket.status,
        "priority": ticket.priority,
        "type": ticket.type,
        "clientId": ticket.client_id,
        "clientName": ticket.client.name if ticket.client else None,
        "assignee": ticket.assignee,
        "createdAt": iso_datetime(ticket.created_at),
        "updatedAt": iso_datetime(ticket.updated_at),
        "scheduledFor": iso_date(ticket.scheduled_for),
        "services": [s.name for s in ticket.services],
        "impact": ticket.impact,
    }


def client_to_dict(client, open_tickets_only: bool = False) -> dict:
    tickets = client.tickets
    if open_tickets_only:
        tickets = [t for t in tickets if t.status == "open"]
    return {
        "id": client.id,
        "name": client.name,
        "website": client.website,
        "industry": client.industry,
        "size": client.size,
        "status": client.status,
        "createdAt": iso_datetime(client.created_at),
        "updatedAt": iso_datetime(client.updated_at),
        "contacts": [contact_to_dict(c) for c in client.contacts],
        "services": [service_to_dict(s) for s in client.services],
        "tickets": [ticket_to_dict(t) for t in tickets],
    }


def activity_to_dict(activity) -> dict:
    return {
        "id": activity.id,
        "type": activity.type,
        "description": activity.description,
        "user": activity.user,
        "target": activity.target,
        "status": activity.status,
        "createdAt": iso_datetime(activity.created_at),
    }


def allocation_to_dict(allocation) -> dict:
    return {
        "id": allocation.id,
        "serviceId": allocation.service_id,
        "clientId": allocation.client_id,
        "clientName": allocation.client.name if allocation.client else None,
        "allocated": money(allocation.allocated),
        "used": money(allocation.used),
        "cost": money(allocation.cost),
        "timestamp": iso_datetime(allocation.timestamp),
    }


def template_to_dict(template) -> dict:
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "type": template.type,
        "version": template.version,
        "status": template.status,
        "author": template.author,
        "repository": template.repository,
        "technologies": list(template.technologies or []),
        "usageCount": template.usage_count,
        "createdAt": iso_datetime(template.created_at),
        "updatedAt": iso_datetime(template.updated_at),
    }
