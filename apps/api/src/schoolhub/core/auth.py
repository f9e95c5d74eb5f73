"""
Authentication Dependencies

Provides the FastAPI dependency that resolves the authenticated user from the
session token. The token is read from the HttpOnly session cookie first and
from an `Authorization: Bearer` header otherwise.

SECURITY NOTE:
- Tokens are not revoked on logout. A token that was issued before logout
  keeps authenticating until it expires (one day by default).
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from schoolhub.core.config import settings
from schoolhub.core.security import ACCESS_TOKEN_TYPE, decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation; the cookie is the primary transport
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token (alternative to the session cookie)",
)


@dataclass
class CurrentUser:
    """
    An authenticated caller, populated from token claims.

    Attributes:
        id: User's unique identifier
    """

    id: str

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


def resolve_user_from_token(token: str) -> CurrentUser:
    """
    Validate a token and extract the user it is bound to.

    Raises:
        HTTPException 401: If the token is invalid, expired or of the wrong type
    """
    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired session token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims.")

    return CurrentUser(id=str(user_id))


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """
    FastAPI dependency that returns the authenticated user.

    Usage:
        @router.get("/protected")
        async def protected(user: CurrentUser = Depends(get_current_user)):
            ...

    Raises:
        HTTPException 401: If no token is present or it fails validation
    """
    token = _extract_token(request, credentials)
    if not token:
        raise _unauthorized("NOT_AUTHENTICATED", "Authentication is required.")

    user = resolve_user_from_token(token)
    logger.debug(f"Authenticated user: {user.id}")
    return user


__all__ = [
    "CurrentUser",
    "get_current_user",
    "resolve_user_from_token",
]
