"""
Authentication Router

Endpoints:
- POST /auth/register - Start registration, email an OTP
- POST /auth/verify-otp - Confirm the registration OTP, receive a token
- POST /auth/login - Exchange credentials for a token
- POST /auth/forgot-password - Email a password reset OTP
- POST /auth/reset-password - Set a new password with the reset OTP
- POST /auth/logout - Clear the session cookie
- GET /auth/me - Current user's profile

Tokens are returned in the response body and set as an HttpOnly,
SameSite=strict session cookie. Service errors are turned into
`{"error": ..., "code": ...}` responses by the handlers in main.py.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from schoolhub.core.auth import CurrentUser, get_current_user
from schoolhub.core.config import settings
from schoolhub.core.rate_limit import rate_limit
from schoolhub.modules.auth.dependencies import get_auth_service, get_user_store
from schoolhub.modules.auth.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
    VerifyOTPRequest,
)
from schoolhub.modules.auth.service import AuthService
from schoolhub.modules.users.repository import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSE_EXAMPLE = {"error": "Invalid or expired OTP.", "code": "INVALID_OTP"}


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_expire_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


@router.post(
    "/register",
    response_model=MessageResponse,
    summary="Register",
    description="""
Create an unverified account (or refresh a pending one) and email a 6-digit OTP
that expires in 10 minutes. The account cannot log in until the OTP is verified.

Registering again before verifying replaces the previous OTP.
""",
    responses={
        400: {"description": "Missing fields or email already registered"},
        500: {"description": "OTP email could not be sent; register again to retry"},
    },
)
@rate_limit(limit=5, window_seconds=300)
async def register(
    request: Request,
    data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.register(data.email, data.username, data.password)


@router.post(
    "/verify-otp",
    response_model=TokenResponse,
    summary="Verify Registration OTP",
    responses={400: {"content": {"application/json": {"example": ERROR_RESPONSE_EXAMPLE}}}},
)
@rate_limit(limit=10, window_seconds=300)
async def verify_otp(
    request: Request,
    response: Response,
    data: VerifyOTPRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Verify the emailed OTP; on success the user is logged in."""
    result = await service.verify_otp(data.email, data.otp)
    _set_session_cookie(response, result.token)
    return result


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    responses={
        400: {"description": "Missing fields"},
        401: {"description": "Invalid credentials (unknown, unverified, or wrong password)"},
    },
)
@rate_limit(limit=10, window_seconds=60)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    result = await service.login(data.email, data.password)
    _set_session_cookie(response, result.token)
    return result


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request Password Reset OTP",
    responses={
        400: {"description": "Missing email"},
        404: {"description": "User not found"},
    },
)
@rate_limit(limit=5, window_seconds=300)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.forgot_password(data.email)


@router.post(
    "/reset-password",
    response_model=TokenResponse,
    summary="Reset Password",
    responses={
        400: {"description": "Missing fields or invalid/expired OTP"},
        404: {"description": "User not found"},
    },
)
@rate_limit(limit=10, window_seconds=300)
async def reset_password(
    request: Request,
    response: Response,
    data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    result = await service.reset_password(data.email, data.otp, data.new_password)
    _set_session_cookie(response, result.token)
    return result


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log Out",
    description="""
Clear the session cookie.

Tokens are not revoked: a copy of the token obtained before logout keeps
working until it expires.
""",
)
async def logout(
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return await service.logout()


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current User",
    responses={401: {"description": "Missing, invalid or expired token"}},
)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
) -> UserResponse:
    user = await store.get_by_id(current_user.id)
    if user is None or not user.verified:
        logger.warning(f"Token for unknown or unverified user: {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "INVALID_TOKEN",
                "message": "Invalid or expired authentication token.",
            },
        )
    return UserResponse.model_validate(user)
