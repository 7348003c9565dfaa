import pytest

from agencyhub.models import Activity, Template


def _template_body(**extra):
    body = {
        "name": "Trades Starter",
        "description": "Five-page site for plumbers and electricians",
        "type": "website",
        "author": "dana",
        "repository": "https://git.example/templates/trades-starter",
        "technologies": ["Flask", "Tailwind"],
    }
    body.update(extra)
    return body


def _create_template(client, **extra):
    resp = client.post("/api/templates", json=_template_body(**extra))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


# --- Create ---

def test_create_template(app, client):
    data = _create_template(client)

    assert data["name"] == "Trades Starter"
    assert data["status"] == "draft"
    assert data["version"] == "1.0.0"
    assert data["technologies"] == ["Flask", "Tailwind"]
    assert data["usageCount"] == 0

    with app.app_context():
        entry = Activity.query.filter_by(type="template").one()
        assert entry.description == 'Template "Trades Starter" created'
        assert entry.user == "dana"


def test_template_name_required(client):
    resp = client.post("/api/templates", json=_template_body(name="  "))
    assert resp.status_code == 400


def test_template_bad_status(client):
    resp = client.post("/api/templates", json=_template_body(status="archived"))
    assert resp.status_code == 400


@pytest.mark.parametrize("field, value", [("technologies", "Flask"), ("usageCount", -1)])
def test_template_bad_values(app, client, field, value):
    resp = client.post("/api/templates", json=_template_body(**{field: value}))
    assert resp.status_code == 400
    with app.app_context():
        assert Template.query.count() == 0


# --- Read / list ---

def test_list_newest_first(client):
    _create_template(client, name="Older")
    _create_template(client, name="Newer")
    names = [t["name"] for t in client.get("/api/templates").get_json()]
    assert names == ["Newer", "Older"]


def test_get_template(client):
    created = _create_template(client)
    assert client.get(f"/api/templates/{created['id']}").get_json()["name"] == "Trades Starter"


def test_get_missing_template(client):
    resp = client.get("/api/templates/999")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Template not found"}


# --- Update / delete ---

def test_update_template(app, client):
    created = _create_template(client)
    resp = client.put(
        f"/api/templates/{created['id']}",
        json={"status": "published", "version": "1.1.0", "usageCount": 4, "author": "sam"},
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "published"
    assert data["version"] == "1.1.0"
    assert data["usageCount"] == 4
    assert data["technologies"] == ["Flask", "Tailwind"]

    with app.app_context():
        entry = Activity.query.filter_by(type="template").order_by(Activity.id.desc()).first()
        assert entry.description == 'Template "Trades Starter" updated'
        assert entry.user == "sam"


def test_update_cannot_blank_name(client):
    created = _create_template(client)
    assert client.put(f"/api/templates/{created['id']}", json={"name": ""}).status_code == 400
    assert client.get(f"/api/templates/{created['id']}").get_json()["name"] == "Trades Starter"


def test_delete_template(app, client):
    created = _create_template(client)
    resp = client.delete(f"/api/templates/{created['id']}")
    assert resp.status_code == 204
    assert client.get(f"/api/templates/{created['id']}").status_code == 404

    with app.app_context():
        entry = Activity.query.filter_by(type="template").order_by(Activity.id.desc()).first()
        assert entry.description == 'Template "Trades Starter" deleted'
        assert entry.user == "System"
    assert client.delete(f"/api/templates/{created['id']}").status_code == 404
