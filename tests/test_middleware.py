"""
test_middleware.py — Tests for request/response middleware

Verifies request ID generation, the health endpoint, and the validation
error handler in main.py.

Called by: pytest
Depends on: app/main.py (middleware), tests/conftest.py (client fixture)
"""

from loguru import logger

from app.config import APP_VERSION


def test_request_id_unique_per_request(client):
    """Each request gets a distinct ID."""
    ids = {client.get("/health").headers["X-Request-ID"] for _ in range(5)}
    assert len(ids) == 5


def test_health_returns_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": APP_VERSION}


def test_404_still_gets_request_id(client):
    """Even error responses should carry the request ID."""
    resp = client.get("/nonexistent-route-xyz")
    assert "X-Request-ID" in resp.headers


def test_validation_error_shape(client, team_admin, test_team, tournament_type, auth_headers):
    resp = client.post(
        "/api/events",
        json={
            "team_id": test_team.id,
            "event_type_id": tournament_type.id,
            "start_time": "2026-11-14T09:30:00",
            "max_attendees": -1,
        },
        headers=auth_headers(team_admin),
    )
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"] == "Validation error"
    assert data["status_code"] == 422
    assert any("max_attendees" in d["loc"] for d in data["detail"])


def test_request_is_logged_with_context(client):
    records = []
    sink = logger.add(lambda m: records.append(m.record), format="{message}")
    try:
        resp = client.get("/health")
    finally:
        logger.remove(sink)

    line = next(r for r in records if r["extra"].get("path") == "/health")
    assert line["extra"]["method"] == "GET"
    assert line["extra"]["status"] == 200
    assert line["extra"]["request_id"] == resp.headers["X-Request-ID"]
    assert line["extra"]["duration_ms"] >= 0
