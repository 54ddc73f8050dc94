"""
tests/test_security_headers.py — Tests for security headers on responses

Validates that the request_id_middleware in main.py sets all expected
security headers (OWASP recommended) on every response, and that errors
come back in the structured JSON shape.

Called by: pytest
Depends on: app.main (request_id_middleware, exception handlers)
"""

from app.config import settings


def test_x_request_id_header(client):
    """Every response includes X-Request-ID."""
    resp = client.get("/health")
    assert len(resp.headers["X-Request-ID"]) == 8  # uuid[:8]


def test_owasp_headers(client):
    resp = client.get("/health")
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert resp.headers.get("X-Frame-Options") == "DENY"
    assert resp.headers.get("X-XSS-Protection") == "1; mode=block"
    assert resp.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"
    assert resp.headers.get("X-API-Version") == "v1"


def test_no_hsts_outside_production(client):
    assert "Strict-Transport-Security" not in client.get("/health").headers


def test_hsts_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "app_url", "https://api.clubhouse.example")
    resp = client.get("/health")
    assert resp.headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains"


def test_security_headers_on_api_endpoint(client, outsider, wrestling, auth_headers):
    """Security headers are present on API responses, not just health."""
    resp = client.get("/api/sports", headers=auth_headers(outsider))
    assert resp.status_code == 200
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert resp.headers.get("X-Frame-Options") == "DENY"
    assert "X-Request-ID" in resp.headers


def test_security_headers_on_unknown_route(client):
    """Security headers are present even on error responses."""
    resp = client.get("/api/nonexistent-endpoint-xyz")
    assert resp.status_code == 404
    assert "X-Request-ID" in resp.headers
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"


def test_global_exception_handler_registered():
    from app.main import app

    assert Exception in app.exception_handlers


def test_error_response_format(client, outsider, auth_headers):
    """HTTP errors return structured JSON with error, status_code, and request_id."""
    resp = client.get("/api/competitions/999999", headers=auth_headers(outsider))
    assert resp.status_code == 404
    data = resp.json()
    assert data["status_code"] == 404
    assert data["error"]
    assert data["request_id"] == resp.headers["X-Request-ID"]
    assert "detail" not in data


def test_unauthenticated_error_format(client):
    resp = client.get("/api/teams")
    assert resp.status_code == 401
    assert resp.json()["status_code"] == 401
