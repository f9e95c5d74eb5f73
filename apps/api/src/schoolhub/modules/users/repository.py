"""
User Repository

Database operations for user credential records.

Writes are committed immediately so that a later failure in the same request
(for example an email that could not be delivered) does not undo them.
"""

import logging
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.users.models import User

logger = logging.getLogger(__name__)

# Fields the auth flows are allowed to write
MUTABLE_FIELDS = frozenset(
    {
        "username",
        "password_hash",
        "verified",
        "otp",
        "otp_expiry",
        "password_reset_otp",
        "password_reset_expiry",
    }
)


class UserStore(Protocol):
    """Persistence operations the auth service depends on."""

    async def get_by_email(self, email: str) -> User | None: ...

    async def get_by_id(self, user_id: str) -> User | None: ...

    async def create(self, **fields: Any) -> User: ...

    async def update_by_email(self, email: str, /, **fields: Any) -> User | None: ...


class UserRepository:
    """SQLAlchemy-backed user store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """
        Get a user by email address (exact match).

        Args:
            email: Email address

        Returns:
            User instance or None if not found
        """
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    async def create(self, **fields: Any) -> User:
        """
        Create a new user record.

        Args:
            **fields: Column values; must include email, username and password_hash

        Returns:
            Created User instance
        """
        user = User(**fields)

        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.email}")
        return user

    async def update_by_email(self, email: str, /, **fields: Any) -> User | None:
        """
        Update the user with the given email.

        Args:
            email: Email of the user to update
            **fields: Column values to set

        Returns:
            Updated User instance or None if no user has that email

        Raises:
            ValueError: If a field is not writable
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update user fields: {sorted(unknown)}")

        user = await self.get_by_email(email)
        if user is None:
            return None

        for name, value in fields.items():
            setattr(user, name, value)

        await self.db.commit()
        await self.db.refresh(user)
        return user


async def clear_expired_otps(db: AsyncSession, now: datetime) -> dict[str, int]:
    """
    Null out OTP pairs whose expiry has passed.

    Each pair is cleared as a unit; the registration and reset pairs are
    handled independently.

    Returns:
        Number of registration and reset pairs cleared
    """
    registration = await db.execute(
        update(User)
        .where(User.otp_expiry.is_not(None), User.otp_expiry < now)
        .values(otp=None, otp_expiry=None)
    )
    reset = await db.execute(
        update(User)
        .where(User.password_reset_expiry.is_not(None), User.password_reset_expiry < now)
        .values(password_reset_otp=None, password_reset_expiry=None)
    )
    await db.commit()

    return {
        "registration_otps_cleared": registration.rowcount or 0,
        "reset_otps_cleared": reset.rowcount or 0,
    }
