def _service_id(client, client_id, capacity=None, cost_per_unit=None):
    service_id = client.get(f"/api/clients/{client_id}/services").get_json()[1]["id"]
    client.put(
        f"/api/services/{service_id}",
        json={"capacityLimit": capacity, "costPerUnit": cost_per_unit},
    )
    return service_id


def _allocate(client, service_id, client_id, **extra):
    body = {"clientId": client_id, "allocated": 100, "used": 40}
    body.update(extra)
    return client.post(f"/api/services/{service_id}/resources", json=body)


# --- Allocations ---

def test_record_allocation(client, client_id):
    service_id = _service_id(client, client_id, capacity=200)
    resp = _allocate(client, service_id, client_id, cost=12.5)

    assert resp.status_code == 201
    data = resp.get_json()
    assert data["serviceId"] == service_id
    assert data["clientName"] == "Acme Plumbing"
    assert data["allocated"] == 100.0
    assert data["used"] == 40.0
    assert data["cost"] == 12.5
    assert client.get(f"/api/services/{service_id}").get_json()["currentUsage"] == 40.0


def test_used_defaults_to_zero(client, client_id):
    service_id = _service_id(client, client_id)
    resp = client.post(f"/api/services/{service_id}/resources", json={"clientId": client_id, "allocated": 5})
    assert resp.get_json()["used"] == 0.0


def test_allocation_requires_amount(client, client_id):
    service_id = _service_id(client, client_id)
    resp = client.post(f"/api/services/{service_id}/resources", json={"clientId": client_id})
    assert resp.status_code == 400


def test_allocation_for_unknown_client(client, client_id):
    service_id = _service_id(client, client_id)
    assert _allocate(client, service_id, client_id + 100).status_code == 404


def test_allocation_for_unknown_service(client, client_id):
    assert _allocate(client, 999, client_id).status_code == 404


# --- Metrics ---

def test_metrics_without_allocations(client, client_id):
    service_id = _service_id(client, client_id)
    data = client.get(f"/api/services/{service_id}/resources").get_json()

    assert data["service"]["id"] == service_id
    assert data["allocations"] == []
    assert data["resourceMetrics"] == {
        "totalCapacity": 0.0,
        "currentUsage": 0.0,
        "averageUsage": 0.0,
        "peakUsage": 0.0,
        "costPerUnit": 0.0,
    }
    assert data["recommendations"] == []


def test_metrics_and_recommendations(client, client_id):
    service_id = _service_id(client, client_id, capacity=100, cost_per_unit=2)
    _allocate(client, service_id, client_id, allocated=50, used=20)
    _allocate(client, service_id, client_id, allocated=100, used=90)

    data = client.get(f"/api/services/{service_id}/resources").get_json()
    metrics = data["resourceMetrics"]
    assert len(data["allocations"]) == 2
    assert metrics["currentUsage"] == 90.0
    assert metrics["averageUsage"] == 55.0
    assert metrics["peakUsage"] == 90.0

    recs = {r["type"]: r for r in data["recommendations"]}
    assert recs["scaling"]["impact"] == "high"
    assert recs["scaling"]["description"].startswith("Current usage is at 90% of capacity.")
    assert recs["optimization"]["estimatedSavings"] == 60


def test_no_scaling_below_threshold(client, client_id):
    service_id = _service_id(client, client_id, capacity=100)
    _allocate(client, service_id, client_id, allocated=100, used=80)
    recs = client.get(f"/api/services/{service_id}/resources").get_json()["recommendations"]
    assert recs == []


def test_only_latest_allocations_count(client, client_id):
    service_id = _service_id(client, client_id)
    for _ in range(12):
        _allocate(client, service_id, client_id, used=70)
    data = client.get(f"/api/services/{service_id}/resources").get_json()
    assert len(data["allocations"]) == 10
