"""
Tests for health, metrics and root endpoints
"""


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_detailed_health_checks_database(client):
    data = client.get("/health/detailed").json()

    assert data["components"]["database"]["status"] == "healthy"
    assert data["components"]["nurture_dispatcher"]["enabled"] is False


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


def test_metrics_exposed(client):
    client.get("/health")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text


def test_api_root(client):
    data = client.get("/api").json()

    assert data["status"] == "running"
    assert data["version"] == "0.1.0"
