"""
Fixtures for authentication tests.
"""

import pytest
from fastapi.testclient import TestClient

from schoolhub.core.security import decode_token
from schoolhub.main import app
from schoolhub.modules.auth.dependencies import get_notifier, get_user_store
from schoolhub.modules.auth.service import AuthService


@pytest.fixture
def auth_service(user_store, notifier, test_settings, clock):
    """Auth service wired to in-memory collaborators and a fixed clock."""
    return AuthService(
        store=user_store,
        notifier=notifier,
        settings=test_settings,
        clock=clock,
    )


@pytest.fixture
def token_subject(test_settings):
    """Decode a token issued by `auth_service` and return its subject."""

    def _subject(token: str) -> str | None:
        payload = decode_token(token, settings=test_settings)
        return payload["sub"] if payload else None

    return _subject


@pytest.fixture
def client(user_store, notifier):
    """HTTP client with the user store and notifier replaced by fakes."""
    app.dependency_overrides[get_user_store] = lambda: user_store
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def registered_user(user_store):
    """Register helper returning the stored (unverified) record."""

    async def _register(service, email="a@x.com", username="alice", password="pw1"):
        await service.register(email, username, password)
        return user_store.users[email]

    return _register
