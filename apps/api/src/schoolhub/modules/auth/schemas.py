"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(value: str) -> str:
    """
    Validate an email address and return it in the form the API stores.

    The domain is lowercased; the local part is kept as given. Every path that
    writes or looks up a user by email goes through this normalization.

    Raises:
        pydantic.ValidationError: If the address is malformed
    """
    return _email_adapter.validate_python(value)


# Request fields are optional at the schema level so that missing values are
# reported by the service as a VALIDATION_ERROR (400) rather than a 422.


class RegisterRequest(BaseModel):
    """Registration request schema."""

    email: EmailStr | None = None
    username: str | None = Field(None, max_length=100)
    password: str | None = None


class VerifyOTPRequest(BaseModel):
    """OTP verification request schema."""

    email: EmailStr | None = None
    otp: str | None = Field(None, max_length=10)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    """Forgot password request schema."""

    email: EmailStr | None = None


class ResetPasswordRequest(BaseModel):
    """Reset password request schema."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr | None = None
    otp: str | None = Field(None, max_length=10)
    new_password: str | None = Field(None, alias="newPassword")


class MessageResponse(BaseModel):
    """Acknowledgment without a token."""

    message: str


class TokenResponse(BaseModel):
    """Acknowledgment carrying a session token."""

    message: str
    token: str


class UserResponse(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str
    verified: bool
