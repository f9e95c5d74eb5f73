"""
Authentication Service Layer

Manages a user's credential record through registration, one-time password
(OTP) verification, login, password reset and logout.

This module implements:
1. Registration Flow:
   - Reject emails that already belong to a verified user
   - Create (or overwrite the unverified) record with a fresh OTP
   - Email the OTP

2. Verification Flow:
   - Check the registration OTP and its expiry
   - Mark the user verified, clear the OTP and issue a session token

3. Login:
   - Verified users only; one error for every failure cause

4. Password Reset Flow:
   - Email a reset OTP stored separately from the registration OTP
   - Check the reset OTP, replace the password hash and issue a token

State machine (per user record):
    unregistered -> pending verification (register)
    pending verification -> pending verification (register again, new OTP)
    pending verification -> verified (verify_otp)
    verified -> reset pending (forgot_password) -> verified (reset_password)

Security considerations:
- OTPs use cryptographically secure random generation (secrets.randbelow)
- OTPs expire after 10 minutes and are cleared after first successful use
- Wrong and expired OTPs produce the same error (no guessing oracle)
- Unknown user, unverified user and wrong password produce the same login error
- OTP values and passwords are never logged
- Store writes are not rolled back when the OTP email fails; registering or
  requesting a reset again generates and sends a new OTP
- Tokens are not revoked on logout and stay valid until they expire
"""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from schoolhub.core.config import Settings, settings as default_settings
from schoolhub.core.email import Notifier
from schoolhub.core.security import create_access_token, hash_password, verify_password
from schoolhub.modules.auth.schemas import MessageResponse, TokenResponse
from schoolhub.modules.users.repository import UserStore

logger = logging.getLogger(__name__)

REGISTRATION_OTP_SUBJECT = "Your Registration OTP"
PASSWORD_RESET_OTP_SUBJECT = "Password Reset OTP"


class AuthServiceError(Exception):
    """Base exception for authentication service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AuthServiceError):
    """Raised when required input is missing. Nothing has been written."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="VALIDATION_ERROR", status_code=400)


class UserNotFoundError(AuthServiceError):
    """Raised when no user exists for an email."""

    def __init__(self, status_code: int = 404):
        super().__init__(
            message="User not found.",
            error_code="USER_NOT_FOUND",
            status_code=status_code,
        )


class AlreadyRegisteredError(AuthServiceError):
    """Raised when registering an email that belongs to a verified user."""

    def __init__(self):
        super().__init__(
            message="User already exists. Please log in.",
            error_code="ALREADY_REGISTERED",
            status_code=400,
        )


class AlreadyVerifiedError(AuthServiceError):
    """Raised when verifying a user that is already verified."""

    def __init__(self):
        super().__init__(
            message="User already verified. Please log in.",
            error_code="ALREADY_VERIFIED",
            status_code=400,
        )


class InvalidOTPError(AuthServiceError):
    """Raised when an OTP is missing, wrong, or expired."""

    def __init__(self):
        super().__init__(
            message="Invalid or expired OTP.",
            error_code="INVALID_OTP",
            status_code=400,
        )


class InvalidCredentialsError(AuthServiceError):
    """Raised for an unknown user, an unverified user, or a wrong password."""

    def __init__(self):
        super().__init__(
            message="Invalid credentials.",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


class NotificationError(AuthServiceError):
    """Raised when the OTP email could not be sent after the record was saved."""

    def __init__(self):
        super().__init__(
            message="Failed to send OTP email. Please try again.",
            error_code="NOTIFICATION_FAILED",
            status_code=500,
        )


def generate_otp(length: int = 6) -> str:
    """
    Generate a numeric one-time password.

    Every value in [0, 10**length) is equally likely; leading zeros are kept.
    """
    return f"{secrets.randbelow(10**length):0{length}d}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _is_missing(*values: str | None) -> bool:
    return any(value is None or value == "" for value in values)


def _otp_is_valid(
    stored_otp: str | None,
    expiry: datetime | None,
    supplied_otp: str,
    now: datetime,
) -> bool:
    """Exact match against an outstanding, unexpired OTP (expiry instant included)."""
    if not stored_otp or expiry is None:
        return False
    if not secrets.compare_digest(stored_otp.encode(), supplied_otp.encode()):
        return False
    return not now > expiry


@lru_cache
def _dummy_password_hash() -> str:
    # Compared against when the user is unknown so that login does the same work
    return hash_password(secrets.token_urlsafe(16))


class AuthService:
    """
    Credential and OTP lifecycle manager.

    Args:
        store: User persistence
        notifier: Delivers OTP messages
        settings: OTP length/expiry and token settings
        sign_token: Issues a session token for a user id
        clock: Returns the current time (timezone-aware)
    """

    def __init__(
        self,
        store: UserStore,
        notifier: Notifier,
        settings: Settings | None = None,
        sign_token: Callable[[str], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.settings = settings or default_settings
        self.sign_token = sign_token or (
            lambda user_id: create_access_token(user_id, settings=self.settings)
        )
        self.clock = clock or _utcnow

    def _new_otp(self) -> tuple[str, datetime]:
        otp = generate_otp(self.settings.otp_length)
        expiry = self.clock() + timedelta(minutes=self.settings.otp_expiry_minutes)
        return otp, expiry

    async def _send_otp(self, email: str, subject: str, body: str) -> None:
        sent = await self.notifier.send(email, subject, body)
        if not sent:
            logger.warning(f"OTP email could not be delivered to {email} ({subject})")
            raise NotificationError()

    async def register(
        self,
        email: str | None,
        username: str | None,
        password: str | None,
    ) -> MessageResponse:
        """
        Start (or restart) registration for an email.

        Raises:
            ValidationError: If any field is missing
            AlreadyRegisteredError: If the email belongs to a verified user
            NotificationError: If the OTP email failed (the record is kept)
        """
        if _is_missing(email, username, password):
            raise ValidationError("Email, username, and password are required.")

        user = await self.store.get_by_email(email)
        if user is not None and user.verified:
            logger.warning(f"Registration attempt for verified email: {email}")
            raise AlreadyRegisteredError()

        otp, otp_expiry = self._new_otp()
        password_hash = hash_password(password)

        if user is None:
            user = await self.store.create(
                email=email,
                username=username,
                password_hash=password_hash,
                verified=False,
                otp=otp,
                otp_expiry=otp_expiry,
            )
            logger.info(f"Registration started for new user {user.id}")
        else:
            await self.store.update_by_email(
                email,
                username=username,
                password_hash=password_hash,
                otp=otp,
                otp_expiry=otp_expiry,
            )
            logger.info(f"Registration restarted for unverified user {user.id}")

        await self._send_otp(
            email,
            REGISTRATION_OTP_SUBJECT,
            f"Your OTP for registration is: {otp}\n"
            f"It expires in {self.settings.otp_expiry_minutes} minutes.",
        )

        return MessageResponse(message="OTP sent to email. Please verify to complete registration.")

    async def verify_otp(self, email: str | None, otp: str | None) -> TokenResponse:
        """
        Confirm the registration OTP and verify the user.

        Raises:
            ValidationError: If email or otp is missing
            UserNotFoundError: If no user has this email (reported as 400)
            AlreadyVerifiedError: If the user is already verified
            InvalidOTPError: If the OTP is absent, wrong, or expired
        """
        if _is_missing(email, otp):
            raise ValidationError("Email and OTP are required.")

        user = await self.store.get_by_email(email)
        if user is None:
            raise UserNotFoundError(status_code=400)
        if user.verified:
            raise AlreadyVerifiedError()

        if not _otp_is_valid(user.otp, user.otp_expiry, otp, self.clock()):
            logger.warning(f"Invalid or expired registration OTP for user {user.id}")
            raise InvalidOTPError()

        await self.store.update_by_email(email, verified=True, otp=None, otp_expiry=None)

        logger.info(f"User verified: {user.id}")
        token = self.sign_token(str(user.id))
        return TokenResponse(message="User verified successfully.", token=token)

    async def login(self, email: str | None, password: str | None) -> TokenResponse:
        """
        Authenticate a verified user.

        Raises:
            ValidationError: If email or password is missing
            InvalidCredentialsError: For unknown user, unverified user or wrong password
        """
        if _is_missing(email, password):
            raise ValidationError("Email and password are required.")

        user = await self.store.get_by_email(email)
        password_hash = user.password_hash if user is not None else _dummy_password_hash()
        password_ok = verify_password(password, password_hash)

        if user is None or not user.verified or not password_ok:
            logger.warning(f"Failed login attempt for {email}")
            raise InvalidCredentialsError()

        logger.info(f"User logged in: {user.id}")
        return TokenResponse(message="Logged in successfully.", token=self.sign_token(str(user.id)))

    async def forgot_password(self, email: str | None) -> MessageResponse:
        """
        Issue a password reset OTP.

        The registration OTP pair is left untouched.

        Raises:
            ValidationError: If email is missing
            UserNotFoundError: If no user has this email
            NotificationError: If the OTP email failed (the OTP is kept)
        """
        if _is_missing(email):
            raise ValidationError("Email is required.")

        user = await self.store.get_by_email(email)
        if user is None:
            raise UserNotFoundError()

        reset_otp, reset_expiry = self._new_otp()
        await self.store.update_by_email(
            email,
            password_reset_otp=reset_otp,
            password_reset_expiry=reset_expiry,
        )
        logger.info(f"Password reset requested for user {user.id}")

        await self._send_otp(
            email,
            PASSWORD_RESET_OTP_SUBJECT,
            f"Your OTP for password reset is: {reset_otp}\n"
            f"It expires in {self.settings.otp_expiry_minutes} minutes.",
        )

        return MessageResponse(message="Password reset OTP sent to email.")

    async def reset_password(
        self,
        email: str | None,
        otp: str | None,
        new_password: str | None,
    ) -> TokenResponse:
        """
        Replace the password using the reset OTP.

        Does not change the user's verified flag.

        Raises:
            ValidationError: If any field is missing
            UserNotFoundError: If no user has this email
            InvalidOTPError: If the reset OTP is absent, wrong, or expired
        """
        if _is_missing(email, otp, new_password):
            raise ValidationError("Email, OTP, and new password are required.")

        user = await self.store.get_by_email(email)
        if user is None:
            raise UserNotFoundError()

        now = self.clock()
        if not _otp_is_valid(user.password_reset_otp, user.password_reset_expiry, otp, now):
            logger.warning(f"Invalid or expired password reset OTP for user {user.id}")
            raise InvalidOTPError()

        await self.store.update_by_email(
            email,
            password_hash=hash_password(new_password),
            password_reset_otp=None,
            password_reset_expiry=None,
        )

        logger.info(f"Password reset for user {user.id}")
        token = self.sign_token(str(user.id))
        return TokenResponse(message="Password reset successfully.", token=token)

    async def logout(self) -> MessageResponse:
        """
        Acknowledge a logout. The caller discards the client-held token.

        Nothing is revoked server side: the token stays valid until it expires.
        """
        return MessageResponse(message="Logged out successfully.")
