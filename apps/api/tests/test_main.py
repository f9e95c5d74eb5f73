"""Tests for the application-level endpoints and error formatting."""

from fastapi.testclient import TestClient

from schoolhub.main import app

client = TestClient(app)


def test_health():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_ready():
    assert client.get("/ready").json() == {"status": "ready"}


def test_root():
    body = client.get("/").json()

    assert body["status"] == "running"
    assert body["message"] == "Welcome to SchoolHub API"


def test_method_not_allowed_uses_error_shape():
    response = client.get("/api/v1/auth/login")

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed", "code": "HTTP_ERROR"}
