"""Mail schemas."""

from pydantic import BaseModel, EmailStr, Field


class SendEmailRequest(BaseModel):
    """Send email request. At least one of text or html is required."""

    to: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    text: str | None = None
    html: str | None = None


class SendEmailResponse(BaseModel):
    success: bool
    message: str


class MailHealthResponse(BaseModel):
    status: str
    delivery_enabled: bool
    timestamp: str
