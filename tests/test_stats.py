from datetime import date

from agencyhub.services.stats import billing_stats


def _invoice(client, client_id, **extra):
    body = {"clientId": client_id, "items": [{"productId": "website-maintenance"}]}
    body.update(extra)
    resp = client.post("/api/invoices", json=body)
    assert resp.status_code == 201
    return resp.get_json()


def _quote(client, client_id, **extra):
    body = {"clientId": client_id, "items": [{"productId": "chatbot-setup"}]}
    body.update(extra)
    resp = client.post("/api/quotes", json=body)
    assert resp.status_code == 201
    return resp.get_json()


def test_empty_database(app):
    with app.app_context():
        stats = billing_stats()
    assert stats == {
        "totalRevenue": 0.0,
        "monthlyRecurring": 0.0,
        "pendingInvoices": 0.0,
        "overdueInvoices": 0.0,
        "activeQuotes": 0,
        "conversionRate": 0.0,
        "totalClients": 0,
    }


def test_dashboard_figures(app, client, client_id):
    _invoice(client, client_id, type="monthly", status="paid")
    _invoice(client, client_id, status="sent", dueDate="2030-06-01")
    _invoice(client, client_id, status="sent", dueDate="2020-01-01")
    _invoice(client, client_id, type="monthly", status="cancelled")

    _quote(client, client_id, status="sent", validUntil="2030-01-01")
    _quote(client, client_id, status="sent", validUntil="2020-01-01")
    _quote(client, client_id, status="accepted")

    with app.app_context():
        stats = billing_stats(today=date(2026, 10, 19))

    assert stats["totalRevenue"] == 99.0
    assert stats["monthlyRecurring"] == 99.0
    assert stats["pendingInvoices"] == 198.0
    assert stats["overdueInvoices"] == 99.0
    assert stats["activeQuotes"] == 1
    assert stats["conversionRate"] == 50.0
    assert stats["totalClients"] == 1


def test_per_client_view(client, client_id):
    _invoice(client, client_id, status="paid")
    _invoice(client, client_id, status="sent")
    for _ in range(4):
        _quote(client, client_id)

    stats = client.get(f"/api/billing/stats?clientId={client_id}").get_json()
    assert stats["totalPaid"] == 99.0
    assert stats["pendingAmount"] == 99.0
    assert len(stats["recentQuotes"]) == 3
    assert len(stats["recentInvoices"]) == 2
    assert stats["recentQuotes"][0]["amount"] == 800.0


def test_other_client_sees_nothing(client, client_id):
    _invoice(client, client_id, status="paid")
    stats = client.get(f"/api/billing/stats?clientId={client_id + 1}").get_json()
    assert stats["totalPaid"] == 0.0
    assert stats["recentInvoices"] == []
