from tests.helpers import create_manager, auth_headers


def test_health_ok(client):
    """Test health check endpoint"""
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["service"] == "checkin-api"
    assert "timestamp" in body


def test_root_endpoint(client):
    """Test root endpoint"""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Team Check-in Backend"
    assert data["status"] == "ok"
    assert "docs" in data
    assert "health" in data


def test_unknown_route_with_token_is_404_envelope(client, users):
    manager = create_manager(users)
    r = client.get("/nope", headers=auth_headers(manager))
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_unknown_route_without_token_is_401(client):
    r = client.get("/nope")
    assert r.status_code == 401
    assert r.json()["error"] == "Authentication failed"
