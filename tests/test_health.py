# tests/test_health.py
from fastapi import status
from fastapi.testclient import TestClient


def test_health_responds_ok(client: TestClient) -> None:
    """The liveness check answers without touching the database."""
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"ok": True}


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    r = client.get("/api/nope")
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json() == {"error": "Not Found"}
