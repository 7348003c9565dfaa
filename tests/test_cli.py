from agencyhub.models import Activity, Client


def test_seed_demo_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0, result.output
    assert "Created 3 client(s)" in result.output

    result = runner.invoke(args=["seed-demo"])
    assert "nothing to do" in result.output

    with app.app_context():
        assert Client.query.count() == 3
        harbor = Client.query.filter_by(name="Harbor Dental Group").one()
        assert [s.type for s in harbor.services][:2] == ["website-template", "website-maintenance"]
        assert harbor.contacts[0].is_primary


def test_sweep_marks_overdue_and_expired(app, client, client_id):
    sent_invoice = client.post("/api/invoices", json={
        "clientId": client_id, "status": "sent", "dueDate": "2029-12-01",
        "items": [{"productId": "website-maintenance"}],
    }).get_json()["invoiceNumber"]
    client.post("/api/invoices", json={
        "clientId": client_id, "status": "draft", "dueDate": "2029-12-01",
        "items": [{"productId": "website-maintenance"}],
    })
    sent_quote = client.post("/api/quotes", json={
        "clientId": client_id, "status": "sent", "validUntil": "2029-12-01",
        "items": [{"productId": "chatbot-setup"}],
    }).get_json()["id"]

    result = app.test_cli_runner().invoke(args=["billing", "sweep", "--today", "2030-01-01"])
    assert result.exit_code == 0, result.output
    assert f"Overdue invoices: 1 {sent_invoice}" in result.output
    assert f"Expired quotes: 1 {sent_quote}" in result.output

    assert client.get(f"/api/invoices/{sent_invoice}").get_json()["status"] == "overdue"
    assert client.get(f"/api/quotes/{sent_quote}").get_json()["status"] == "expired"
    with app.app_context():
        assert Activity.query.filter_by(status="warning", user="cli").count() == 2


def test_sweep_with_nothing_due(app):
    result = app.test_cli_runner().invoke(args=["billing", "sweep"])
    assert result.exit_code == 0
    assert "Overdue invoices: 0" in result.output
    assert "Expired quotes: 0" in result.output
