from agencyhub.services.activity import record_activity


def test_post_and_list(client):
    resp = client.post(
        "/api/activities",
        json={"type": "client", "description": "Kickoff call booked", "user": "dana", "target": "Acme"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["status"] == "success"

    listed = client.get("/api/activities").get_json()
    assert [a["description"] for a in listed] == ["Kickoff call booked"]
    assert listed[0]["user"] == "dana"


def test_newest_first_with_limit(app, client):
    with app.app_context():
        for n in range(5):
            record_activity("system", f"entry {n}")

    listed = client.get("/api/activities?limit=2").get_json()
    assert [a["description"] for a in listed] == ["entry 4", "entry 3"]


def test_filters(app, client):
    with app.app_context():
        record_activity("invoice", "Invoice overdue", status="warning", user="cli")
        record_activity("quote", "Quote sent")

    assert len(client.get("/api/activities?type=invoice").get_json()) == 1
    assert len(client.get("/api/activities?status=warning").get_json()) == 1
    assert len(client.get("/api/activities?user=cli").get_json()) == 1


def test_required_fields(client):
    assert client.post("/api/activities", json={"type": "client"}).status_code == 400
    assert client.post("/api/activities", json={"description": "x"}).status_code == 400


def test_bad_status(client):
    resp = client.post(
        "/api/activities", json={"type": "client", "description": "x", "status": "info"}
    )
    assert resp.status_code == 400


def test_unknown_status_falls_back_when_recorded_internally(app):
    with app.app_context():
        entry = record_activity("system", "note", status="info")
        assert entry.status == "success"
