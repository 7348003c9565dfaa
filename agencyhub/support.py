# agencyhub/support.py
from __future__ import annotations

from flask import Blueprint, abort, jsonify, request

from .extensions import db, write_limit
from .models import TICKET_PRIORITIES, TICKET_STATUSES, Client, Service, Ticket
from .services.activity import record_activity
from .utils.db import commit_or_rollback, get_or_none
from .utils.parsing import PayloadError, clean_str, filter_arg, json_body, parse_date, parse_int
from .utils.serialize import ticket_to_dict

support = Blueprint("support", __name__, url_prefix="/api")

TICKET_TITLE_MAXLEN = 200
TICKET_REQUIRED = ("title", "description", "type", "priority", "clientId")


def _ticket_or_404(ticket_id: int) -> Ticket:
    ticket = get_or_none(Ticket, ticket_id)
    if ticket is None:
        abort(404, description="Ticket not found")
    return ticket


def _service_names(raw) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PayloadError("services must be a list of service names")
    return [n for n in (clean_str(x) for x in raw) if n]


def _services_by_name(client_id: int, names: list[str]) -> list[Service]:
    """Resolve names within one client; unknown names are skipped."""
    if not names:
        return []
    return (
        Service.query
        .filter(Service.client_id == client_id, Service.name.in_(names))
        .order_by(Service.id.asc())
        .all()
    )


def _checked(value, allowed: set[str], label: str) -> str:
    if value not in allowed:
        raise PayloadError(f"Invalid ticket {label}: {value}")
    return value


# ======================
# Tickets
# ======================
@support.route("/tickets", methods=["GET"])
def list_tickets():
    q = Ticket.query
    client_id = parse_int(request.args.get("clientId"))
    if client_id is not None:
        q = q.filter(Ticket.client_id == client_id)

    for arg, column in (
        ("status", Ticket.status),
        ("priority", Ticket.priority),
        ("type", Ticket.type),
        ("assignee", Ticket.assignee),
    ):
        value = filter_arg(arg)
        if value:
            q = q.filter(column == value)

    tickets = q.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()
    return jsonify([ticket_to_dict(t) for t in tickets])


@support.route("/tickets", methods=["POST"])
@write_limit()
def create_ticket():
    data = json_body()

    names = _service_names(data.get("services"))
    if any(clean_str(data.get(k)) is None for k in TICKET_REQUIRED) or not names:
        return jsonify({"error": "Missing required fields"}), 400

    client_id = parse_int(data.get("clientId"))
    client = get_or_none(Client, client_id)
    if client is None:
        abort(404, description="Client not found")

    ticket = Ticket(
        client_id=client.id,
        title=clean_str(data.get("title"), TICKET_TITLE_MAXLEN),
        description=clean_str(data.get("description")),
        type=clean_str(data.get("type")),
        priority=_checked(clean_str(data.get("priority")), TICKET_PRIORITIES, "priority"),
        status="open",
        assignee=clean_str(data.get("assignee")),
        impact=clean_str(data.get("impact")),
        scheduled_for=parse_date(data.get("scheduledFor")),
    )
    ticket.services = _services_by_name(client.id, names)

    db.session.add(ticket)
    if not commit_or_rollback("Create ticket"):
        return jsonify({"error": "Failed to create ticket"}), 500

    record_activity(
        "ticket",
        f"Ticket #{ticket.id} opened for {client.name}: {ticket.title}",
        target=client.name,
        status="warning" if ticket.priority in ("high", "urgent") else "success",
    )
    return jsonify(ticket_to_dict(ticket)), 201


@support.route("/tickets/<int:ticket_id>", methods=["GET"])
def get_ticket(ticket_id):
    return jsonify(ticket_to_dict(_ticket_or_404(ticket_id)))


@support.route("/tickets/<int:ticket_id>", methods=["PUT"])
@write_limit()
def update_ticket(ticket_id):
    ticket = _ticket_or_404(ticket_id)
    data = json_body()

    for key in ("title", "description", "type"):
        if key in data:
            value = clean_str(data.get(key))
            if not value:
                raise PayloadError(f"{key} cannot be empty")
            setattr(ticket, key, value)
    for key in ("assignee", "impact"):
        if key in data:
            setattr(ticket, key, clean_str(data.get(key)))
    if "priority" in data:
        ticket.priority = _checked(clean_str(data.get("priority")), TICKET_PRIORITIES, "priority")
    if "status" in data:
        ticket.status = _checked(clean_str(data.get("status")), TICKET_STATUSES, "status")
    if "scheduledFor" in data:
        ticket.scheduled_for = parse_date(data.get("scheduledFor"))

    # An empty or missing list leaves the current links alone.
    names = _service_names(data.get("services"))
    if names:
        ticket.services = _services_by_name(ticket.client_id, names)

    if not commit_or_rollback("Update ticket"):
        return jsonify({"error": "Failed to update ticket"}), 500
    return jsonify(ticket_to_dict(ticket))


@support.route("/tickets/<int:ticket_id>", methods=["DELETE"])
@write_limit()
def delete_ticket(ticket_id):
    ticket = _ticket_or_404(ticket_id)
    db.session.delete(ticket)
    if not commit_or_rollback("Delete ticket"):
        return jsonify({"error": "Failed to delete ticket"}), 500
    return jsonify({"message": "Ticket deleted successfully"})
