"""create users table

Revision ID: a1f0c2d3e4b5
Revises:
Create Date: 2026-10-19 12:00:00.000000

This migration creates the users table holding credentials, the verified
flag, and the two independent OTP pairs (registration and password reset).
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1f0c2d3e4b5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the users table."""
    op.create_table(
        "users",
        # Primary key and timestamps (from BaseModel)
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        # Credentials
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        # Registration OTP
        sa.Column("otp", sa.String(length=10), nullable=True),
        sa.Column("otp_expiry", sa.DateTime(timezone=True), nullable=True),
        # Password reset OTP
        sa.Column("password_reset_otp", sa.String(length=10), nullable=True),
        sa.Column("password_reset_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        # Each OTP is stored together with its expiry
        sa.CheckConstraint(
            "(otp IS NULL) = (otp_expiry IS NULL)",
            name="ck_users_otp_pair",
        ),
        sa.CheckConstraint(
            "(password_reset_otp IS NULL) = (password_reset_expiry IS NULL)",
            name="ck_users_password_reset_otp_pair",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    """Drop the users table."""
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
