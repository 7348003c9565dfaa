# agencyhub/clients.py
from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, abort, jsonify

from .billing.pricing import optional_decimal
from .extensions import db, write_limit
from .models import Client, Contact, ResourceAllocation, Service
from .services.activity import record_activity
from .services.resources import recent_allocations, recommendations, resource_metrics
from .utils.db import commit_or_rollback, get_or_none
from .utils.parsing import PayloadError, clean_str, json_body, parse_int
from .utils.serialize import allocation_to_dict, client_to_dict, money, service_to_dict

clients_bp = Blueprint("clients", __name__, url_prefix="/api")

# -------------------------------------------------------------------
# Helpers / Constants
# -------------------------------------------------------------------
CLIENT_STATUSES = {"active", "inactive", "prospect"}
SERVICE_STATUSES = {"active", "paused", "cancelled"}
CLIENT_NAME_MAXLEN = 160

# camelCase body key -> column
CLIENT_FIELDS = {
    "name": "name",
    "website": "website",
    "industry": "industry",
    "size": "size",
}
SERVICE_TEXT_FIELDS = {
    "name": "name",
    "type": "type",
    "description": "description",
}
SERVICE_MONEY_FIELDS = {
    "costPerUnit": "cost_per_unit",
    "customPrice": "custom_price",
    "priceRangeMin": "price_range_min",
    "priceRangeMax": "price_range_max",
    "capacityLimit": "capacity_limit",
    "currentUsage": "current_usage",
}


def _client_or_404(client_id: int) -> Client:
    client = get_or_none(Client, client_id)
    if client is None:
        abort(404, description="Client not found")
    return client


def _service_or_404(service_id: int, client_id: int | None = None) -> Service:
    q = Service.query.filter(Service.id == service_id)
    if client_id is not None:
        q = q.filter(Service.client_id == client_id)
    service = q.first()
    if service is None:
        abort(404, description="Service not found")
    return service


def _apply_client_fields(client: Client, data: dict) -> None:
    for key, attr in CLIENT_FIELDS.items():
        if key in data:
            setattr(client, attr, clean_str(data.get(key)))
    if "status" in data:
        status = clean_str(data.get("status"))
        if status not in CLIENT_STATUSES:
            raise PayloadError(f"Invalid client status: {status}")
        client.status = status
    if not client.name:
        raise PayloadError("Client name is required")


def _apply_service_fields(service: Service, data: dict) -> None:
    for key, attr in SERVICE_TEXT_FIELDS.items():
        if key in data:
            setattr(service, attr, clean_str(data.get(key)))
    for key, attr in SERVICE_MONEY_FIELDS.items():
        if key in data:
            setattr(service, attr, optional_decimal(data.get(key)))
    if "included" in data:
        service.included = bool(data.get("included"))
    if "status" in data:
        status = clean_str(data.get("status"))
        if status not in SERVICE_STATUSES:
            raise PayloadError(f"Invalid service status: {status}")
        service.status = status
    if not service.name:
        raise PayloadError("Service name is required")


def _contact_from(entry, contact_type: str, is_primary: bool) -> Contact | None:
    if not isinstance(entry, dict):
        return None
    name = clean_str(entry.get("name"))
    if not name:
        return None
    return Contact(
        name=name,
        role=clean_str(entry.get("role")),
        email=clean_str(entry.get("email")),
        phone=clean_str(entry.get("phone")),
        is_primary=is_primary,
        type=contact_type,
    )


def _onboarding_service(entry: dict) -> Service:
    """Map a catalog-backed selection from the onboarding form to a Service."""
    price_range = entry.get("priceRange") or {}
    service = Service(
        name=clean_str(entry.get("name")),
        type=clean_str(entry.get("id")),
        description=clean_str(entry.get("description")),
        cost_per_unit=optional_decimal(entry.get("basePrice")),
        custom_price=optional_decimal(entry.get("customPrice")),
        price_range_min=optional_decimal(price_range.get("min")) if isinstance(price_range, dict) else None,
        price_range_max=optional_decimal(price_range.get("max")) if isinstance(price_range, dict) else None,
        included=True,
    )
    if not service.name:
        raise PayloadError("Each selected service needs a name")
    return service


# -------------------------------------------------------------------
# Clients
# -------------------------------------------------------------------
@clients_bp.route("/clients", methods=["GET"])
def list_clients():
    clients = Client.query.order_by(Client.id.asc()).all()
    return jsonify([client_to_dict(c, open_tickets_only=True) for c in clients])


@clients_bp.route("/clients", methods=["POST"])
@write_limit()
def create_client():
    data = json_body()

    # Onboarding form shape: companyInfo / contacts.primary+technical / selectedServices
    info = data.get("companyInfo") if isinstance(data.get("companyInfo"), dict) else data
    client = Client()
    _apply_client_fields(client, {k: info.get(k) for k in CLIENT_FIELDS if k in info})
    if client.name and len(client.name) > CLIENT_NAME_MAXLEN:
        raise PayloadError(f"Client name too long (max {CLIENT_NAME_MAXLEN}).")

    contacts = data.get("contacts") if isinstance(data.get("contacts"), dict) else {}
    for contact in (
        _contact_from(contacts.get("primary"), "primary", True),
        _contact_from(contacts.get("technical"), "technical", False),
    ):
        if contact is not None:
            client.contacts.append(contact)

    selected = data.get("selectedServices") or []
    if not isinstance(selected, list):
        raise PayloadError("selectedServices must be a list")
    for entry in selected:
        if isinstance(entry, dict) and entry.get("included"):
            client.services.append(_onboarding_service(entry))

    db.session.add(client)
    if not commit_or_rollback("Create client"):
        return jsonify({"error": "Error creating client"}), 500

    record_activity("client", f"New client {client.name} onboarded", target=client.name)
    return jsonify(client_to_dict(client)), 201


@clients_bp.route("/clients/<int:client_id>", methods=["GET"])
def get_client(client_id):
    return jsonify(client_to_dict(_client_or_404(client_id)))


@clients_bp.route("/clients/<int:client_id>", methods=["PUT"])
@write_limit()
def update_client(client_id):
    client = _client_or_404(client_id)
    _apply_client_fields(client, json_body())
    if not commit_or_rollback("Update client"):
        return jsonify({"error": "Error updating client"}), 500
    return jsonify(client_to_dict(client))


@clients_bp.route("/clients/<int:client_id>", methods=["DELETE"])
@write_limit()
def delete_client(client_id):
    client = _client_or_404(client_id)
    db.session.delete(client)
    if not commit_or_rollback("Delete client"):
        return jsonify({"error": "Error deleting client"}), 500
    return "", 204


# -------------------------------------------------------------------
# Client services
# -------------------------------------------------------------------
@clients_bp.route("/clients/<int:client_id>/services", methods=["GET"])
def list_client_services(client_id):
    client = _client_or_404(client_id)
    return jsonify([service_to_dict(s) for s in client.services])


@clients_bp.route("/clients/<int:client_id>/services", methods=["POST"])
@write_limit()
def create_client_service(client_id):
    client = _client_or_404(client_id)
    service = Service(client_id=client.id)
    _apply_service_fields(service, json_body())

    db.session.add(service)
    if not commit_or_rollback("Create service"):
        return jsonify({"error": "Error creating service"}), 500

    record_activity("service", f"Service {service.name} added for {client.name}", target=service.name)
    return jsonify(service_to_dict(service, include_client=True)), 201


@clients_bp.route("/clients/<int:client_id>/services/<int:service_id>", methods=["GET"])
def get_client_service(client_id, service_id):
    return jsonify(service_to_dict(_service_or_404(service_id, client_id), include_client=True))


@clients_bp.route("/clients/<int:client_id>/services/<int:service_id>", methods=["PUT"])
@write_limit()
def update_client_service(client_id, service_id):
    service = _service_or_404(service_id, client_id)
    _apply_service_fields(service, json_body())
    if not commit_or_rollback("Update service"):
        return jsonify({"error": "Error updating service"}), 500
    return jsonify(service_to_dict(service, include_client=True))


@clients_bp.route("/clients/<int:client_id>/services/<int:service_id>", methods=["DELETE"])
@write_limit()
def delete_client_service(client_id, service_id):
    service = _service_or_404(service_id, client_id)
    db.session.delete(service)
    if not commit_or_rollback("Delete service"):
        return jsonify({"error": "Error deleting service"}), 500
    return "", 204


# -------------------------------------------------------------------
# Services (all clients)
# -------------------------------------------------------------------
@clients_bp.route("/services", methods=["GET"])
def list_services():
    services = Service.query.order_by(Service.id.asc()).all()
    return jsonify([service_to_dict(s, include_client=True) for s in services])


@clients_bp.route("/services", methods=["POST"])
@write_limit()
def create_service():
    data = json_body()
    client_id = parse_int(data.get("clientId"))
    if client_id is None:
        raise PayloadError("clientId is required")
    client = _client_or_404(client_id)

    service = Service(client_id=client.id)
    _apply_service_fields(service, data)
    db.session.add(service)
    if not commit_or_rollback("Create service"):
        return jsonify({"error": "Error creating service"}), 500

    record_activity("service", f"Service {service.name} added for {client.name}", target=service.name)
    return jsonify(service_to_dict(service, include_client=True)), 201


@clients_bp.route("/services/<int:service_id>", methods=["GET"])
def get_service(service_id):
    return jsonify(service_to_dict(_service_or_404(service_id), include_client=True))


@clients_bp.route("/services/<int:service_id>", methods=["PUT"])
@write_limit()
def update_service(service_id):
    service = _service_or_404(service_id)
    _apply_service_fields(service, json_body())
    if not commit_or_rollback("Update service"):
        return jsonify({"error": "Error updating service"}), 500
    return jsonify(service_to_dict(service, include_client=True))


@clients_bp.route("/services/<int:service_id>", methods=["DELETE"])
@write_limit()
def delete_service(service_id):
    service = _service_or_404(service_id)
    db.session.delete(service)
    if not commit_or_rollback("Delete service"):
        return jsonify({"error": "Error deleting service"}), 500
    return "", 204


# -------------------------------------------------------------------
# Service resources
# -------------------------------------------------------------------
@clients_bp.route("/services/<int:service_id>/resources", methods=["GET"])
def service_resources(service_id):
    service = _service_or_404(service_id)
    allocations = recent_allocations(service)
    metrics = resource_metrics(service, allocations)

    return jsonify({
        "service": service_to_dict(service, include_client=True),
        "allocations": [allocation_to_dict(a) for a in allocations],
        "resourceMetrics": {k: money(v) for k, v in metrics.items()},
        "recommendations": recommendations(metrics, allocations),
    })


@clients_bp.route("/services/<int:service_id>/resources", methods=["POST"])
@write_limit()
def create_resource_allocation(service_id):
    service = _service_or_404(service_id)
    data = json_body()

    client_id = parse_int(data.get("clientId"))
    if client_id is None:
        raise PayloadError("clientId is required")
    client = _client_or_404(client_id)

    allocated = optional_decimal(data.get("allocated"))
    if allocated is None:
        raise PayloadError("allocated is required")
    used = optional_decimal(data.get("used")) or Decimal("0")

    allocation = ResourceAllocation(
        service_id=service.id,
        client_id=client.id,
        allocated=allocated,
        used=used,
        cost=optional_decimal(data.get("cost")),
    )
    service.current_usage = used
    db.session.add(allocation)
    if not commit_or_rollback("Create resource allocation"):
        return jsonify({"error": "Error creating resource allocation"}), 500
    return jsonify(allocation_to_dict(allocation)), 201
