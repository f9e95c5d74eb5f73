"""
User Models

Database model holding a user's credentials and one-time password state.
"""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class User(BaseModel):
    """
    User credential record.

    The registration OTP pair (otp, otp_expiry) and the password reset OTP pair
    (password_reset_otp, password_reset_expiry) are independent. Each pair is
    always set and cleared together.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("(otp IS NULL) = (otp_expiry IS NULL)", name="ck_users_otp_pair"),
        CheckConstraint(
            "(password_reset_otp IS NULL) = (password_reset_expiry IS NULL)",
            name="ck_users_password_reset_otp_pair",
        ),
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Becomes True once the registration OTP is confirmed; never reverts
    verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Registration OTP
    otp: Mapped[str | None] = mapped_column(String(10), nullable=True)
    otp_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Password reset OTP
    password_reset_otp: Mapped[str | None] = mapped_column(String(10), nullable=True)
    password_reset_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, verified={self.verified})>"
