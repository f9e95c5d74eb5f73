"""
Shared test fixtures: in-memory collaborators for the auth service.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import pytest

from schoolhub.core.config import Settings
from schoolhub.core.rate_limit import reset_memory_store


@dataclass
class StoredUser:
    """Plain record with the same attributes as the User model."""

    email: str
    username: str
    password_hash: str
    id: str = field(default_factory=lambda: str(uuid4()))
    verified: bool = False
    otp: str | None = None
    otp_expiry: datetime | None = None
    password_reset_otp: str | None = None
    password_reset_expiry: datetime | None = None


class InMemoryUserStore:
    """UserStore backed by a dict keyed by email."""

    def __init__(self):
        self.users: dict[str, StoredUser] = {}
        self.writes = 0

    async def get_by_email(self, email: str) -> StoredUser | None:
        return self.users.get(email)

    async def get_by_id(self, user_id: str) -> StoredUser | None:
        return next((user for user in self.users.values() if user.id == user_id), None)

    async def create(self, **fields: Any) -> StoredUser:
        if fields["email"] in self.users:
            raise ValueError(f"duplicate email {fields['email']}")
        user = StoredUser(**fields)
        self.users[user.email] = user
        self.writes += 1
        return user

    async def update_by_email(self, email: str, /, **fields: Any) -> StoredUser | None:
        user = self.users.get(email)
        if user is None:
            return None
        for name, value in fields.items():
            setattr(user, name, value)
        self.writes += 1
        return user


class FakeNotifier:
    """Records messages instead of sending them."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, body: str) -> bool:
        if self.fail:
            return False
        self.sent.append((to, subject, body))
        return True


class FakeClock:
    """Controllable, timezone-aware clock."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 1, 15, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)

    def set(self, moment: datetime) -> None:
        self.now = moment


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def test_settings():
    """Settings isolated from the environment's secrets and .env file."""
    return Settings(
        _env_file=None,
        python_env="test",
        jwt_secret="test-secret-key-for-signing",
        resend_api_key=None,
    )


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def clock():
    return FakeClock()
