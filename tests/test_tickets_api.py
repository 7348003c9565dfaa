import pytest

from agencyhub.models import Activity


def _ticket_body(client_id, **extra):
    body = {
        "title": "Booking form not sending",
        "description": "Submissions stopped arriving on Monday",
        "type": "issue",
        "priority": "high",
        "clientId": client_id,
        "services": ["Template Website"],
    }
    body.update(extra)
    return body


# --- Create ---

def test_create_ticket(app, client, client_id):
    resp = client.post("/api/tickets", json=_ticket_body(client_id, scheduledFor="2026-11-02"))
    assert resp.status_code == 201
    data = resp.get_json()

    assert isinstance(data["id"], str)
    assert data["status"] == "open"
    assert data["clientName"] == "Acme Plumbing"
    assert data["services"] == ["Template Website"]
    assert data["scheduledFor"] == "2026-11-02"

    with app.app_context():
        entry = Activity.query.filter_by(type="ticket").one()
        assert entry.status == "warning"


@pytest.mark.parametrize("missing", ["title", "description", "type", "priority", "clientId", "services"])
def test_missing_required_fields(client, client_id, missing):
    body = _ticket_body(client_id)
    body.pop(missing)
    resp = client.post("/api/tickets", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing required fields"}


@pytest.mark.parametrize("field", ["title", "description"])
def test_blank_required_text(client, client_id, field):
    resp = client.post("/api/tickets", json=_ticket_body(client_id, **{field: "   "}))
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Missing required fields"}


def test_empty_services_list(client, client_id):
    resp = client.post("/api/tickets", json=_ticket_body(client_id, services=[]))
    assert resp.status_code == 400


def test_unknown_client(client, client_id):
    resp = client.post("/api/tickets", json=_ticket_body(client_id + 100))
    assert resp.status_code == 404


def test_invalid_priority(client, client_id):
    resp = client.post("/api/tickets", json=_ticket_body(client_id, priority="whenever"))
    assert resp.status_code == 400


def test_unknown_service_names_are_skipped(client, client_id):
    resp = client.post(
        "/api/tickets",
        json=_ticket_body(client_id, services=["Website Maintenance", "Not A Service"]),
    )
    assert resp.get_json()["services"] == ["Website Maintenance"]


# --- List / update / delete ---

def test_list_filters(client, client_id):
    client.post("/api/tickets", json=_ticket_body(client_id))
    client.post("/api/tickets", json=_ticket_body(client_id, priority="low", assignee="sam"))

    assert len(client.get("/api/tickets").get_json()) == 2
    assert len(client.get("/api/tickets?priority=low").get_json()) == 1
    assert len(client.get("/api/tickets?assignee=sam").get_json()) == 1
    assert len(client.get("/api/tickets?status=all").get_json()) == 2
    assert client.get(f"/api/tickets?clientId={client_id + 1}").get_json() == []


def test_update_ticket(client, client_id):
    ticket = client.post("/api/tickets", json=_ticket_body(client_id)).get_json()
    resp = client.put(
        f"/api/tickets/{ticket['id']}",
        json={"status": "in_progress", "assignee": "dana", "services": ["Website Maintenance"]},
    )
    data = resp.get_json()
    assert data["status"] == "in_progress"
    assert data["assignee"] == "dana"
    assert data["services"] == ["Website Maintenance"]


def test_update_keeps_services_when_absent(client, client_id):
    ticket = client.post("/api/tickets", json=_ticket_body(client_id)).get_json()
    data = client.put(f"/api/tickets/{ticket['id']}", json={"priority": "urgent"}).get_json()
    assert data["services"] == ["Template Website"]
    assert data["priority"] == "urgent"


def test_update_bad_status(client, client_id):
    ticket = client.post("/api/tickets", json=_ticket_body(client_id)).get_json()
    resp = client.put(f"/api/tickets/{ticket['id']}", json={"status": "done"})
    assert resp.status_code == 400


def test_update_rejects_blank_title(client, client_id):
    ticket = client.post("/api/tickets", json=_ticket_body(client_id)).get_json()
    resp = client.put(f"/api/tickets/{ticket['id']}", json={"title": "  "})
    assert resp.status_code == 400
    assert client.get(f"/api/tickets/{ticket['id']}").get_json()["title"] == "Booking form not sending"


def test_delete_ticket(client, client_id):
    ticket = client.post("/api/tickets", json=_ticket_body(client_id)).get_json()
    resp = client.delete(f"/api/tickets/{ticket['id']}")
    assert resp.get_json() == {"message": "Ticket deleted successfully"}
    assert client.get(f"/api/tickets/{ticket['id']}").status_code == 404
