"""
Create Verified User

Creates a user that can log in immediately, skipping the OTP email.
Intended for bootstrapping local and staging environments.

The email is normalized the same way the API normalizes request emails, so
the account is found by /auth/login regardless of the domain's letter case.

Usage:
    cd apps/api
    python scripts/create_verified_user.py --email admin@schoolhub.dev --username admin
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

from pydantic import ValidationError

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schoolhub.core.database import async_session_maker, engine
from schoolhub.core.security import hash_password
from schoolhub.modules.auth.schemas import normalize_email
from schoolhub.modules.users.repository import UserRepository


async def create_verified_user(email: str, username: str, password: str) -> None:
    """Create the user if no account exists for the email."""
    email = normalize_email(email)

    try:
        async with async_session_maker() as db:
            repo = UserRepository(db)

            existing_user = await repo.get_by_email(email)
            if existing_user:
                print(f"User already exists: {email}")
                print(f"  ID: {existing_user.id}")
                print(f"  Verified: {existing_user.verified}")
                return

            user = await repo.create(
                email=email,
                username=username,
                password_hash=hash_password(password),
                verified=True,
            )

            print("User created successfully!")
            print(f"  Email: {user.email}")
            print(f"  Username: {user.username}")
            print(f"  ID: {user.id}")
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a verified SchoolHub user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--username", required=True)
    args = parser.parse_args()

    try:
        email = normalize_email(args.email)
    except ValidationError:
        parser.error(f"invalid email address: {args.email}")

    password = getpass.getpass("Password: ")
    if not password:
        parser.error("password must not be empty")

    asyncio.run(create_verified_user(email, args.username, password))


if __name__ == "__main__":
    main()
