"""Tests for the mail endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from schoolhub.core.security import create_access_token
from schoolhub.main import app

MAIL = "/api/v1/mail"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token('user-123')}"}


class TestSendEmail:
    def test_requires_authentication(self, client):
        with patch("schoolhub.modules.mail.router.send_email", new_callable=AsyncMock) as mock_send:
            response = client.post(
                f"{MAIL}/send-email",
                json={"to": "b@x.com", "subject": "Hi", "text": "Hello"},
            )

        assert response.status_code == 401
        assert response.json()["code"] == "NOT_AUTHENTICATED"
        mock_send.assert_not_called()

    def test_sends_email(self, client, auth_headers):
        with patch(
            "schoolhub.modules.mail.router.send_email",
            new_callable=AsyncMock,
            return_value=True,
        ) as mock_send:
            response = client.post(
                f"{MAIL}/send-email",
                json={"to": "b@x.com", "subject": "Hi", "html": "<p>Hello</p>"},
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Email sent successfully"}
        mock_send.assert_awaited_once_with(
            to_email="b@x.com",
            subject="Hi",
            html_content="<p>Hello</p>",
            text_content=None,
        )

    def test_requires_content(self, client, auth_headers):
        response = client.post(
            f"{MAIL}/send-email",
            json={"to": "b@x.com", "subject": "Hi"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Either text or html content is required.",
            "code": "VALIDATION_ERROR",
        }

    def test_invalid_recipient(self, client, auth_headers):
        response = client.post(
            f"{MAIL}/send-email",
            json={"to": "nope", "subject": "Hi", "text": "Hello"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_delivery_failure(self, client, auth_headers):
        with patch(
            "schoolhub.modules.mail.router.send_email",
            new_callable=AsyncMock,
            return_value=False,
        ):
            response = client.post(
                f"{MAIL}/send-email",
                json={"to": "b@x.com", "subject": "Hi", "text": "Hello"},
                headers=auth_headers,
            )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to send email",
            "error": "Email delivery failed",
        }


class TestMailHealth:
    def test_health(self, client):
        response = client.get(f"{MAIL}/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert isinstance(body["delivery_enabled"], bool)
        assert body["timestamp"]
