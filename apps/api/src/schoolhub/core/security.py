"""
Security Utilities

Password hashing (bcrypt) and JWT access tokens (PyJWT, HMAC-signed).
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from schoolhub.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72
BCRYPT_ROUNDS = 10

ACCESS_TOKEN_TYPE = "access"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """
    Hash a password with a per-password random salt.

    Args:
        password: Plain text password

    Returns:
        bcrypt hash string
    """
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    Check a password against a stored bcrypt hash.

    Malformed hashes are treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_access_token(
    subject: str,
    additional_claims: dict[str, Any] | None = None,
    settings: Settings | None = None,
) -> str:
    """
    Create a signed access token bound to a user id.

    Args:
        subject: User ID, stored in the `sub` claim
        additional_claims: Extra claims to embed in the token
        settings: Settings providing the secret, algorithm and lifetime

    Returns:
        Encoded JWT string
    """
    settings = settings or default_settings
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": subject,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(days=settings.access_token_expire_days),
    }
    if additional_claims:
        payload.update(additional_claims)

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings | None = None) -> dict[str, Any] | None:
    """
    Decode and validate a token.

    Verifies the signature, algorithm and expiry.

    Returns:
        The token payload, or None if the token is invalid or expired
    """
    settings = settings or default_settings
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Token has expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        return None
