"""
Mail Router

Endpoints:
- POST /mail/send-email - Send an email (authenticated users only)
- GET /mail/health - Email service health
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from schoolhub.core.auth import CurrentUser, get_current_user
from schoolhub.core.email import check_email_health, send_email
from schoolhub.modules.mail.schemas import (
    MailHealthResponse,
    SendEmailRequest,
    SendEmailResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    summary="Send Email",
    responses={
        400: {"description": "Neither text nor html content given"},
        401: {"description": "Not authenticated"},
        500: {"description": "Email delivery failed"},
    },
)
async def send_email_endpoint(
    data: SendEmailRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    if not data.text and not data.html:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "VALIDATION_ERROR",
                "message": "Either text or html content is required.",
            },
        )

    sent = await send_email(
        to_email=data.to,
        subject=data.subject,
        html_content=data.html,
        text_content=data.text,
    )

    if not sent:
        logger.error(f"Email requested by user {current_user.id} could not be sent")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Failed to send email",
                "error": "Email delivery failed",
            },
        )

    logger.info(f"Email sent on behalf of user {current_user.id}")
    return SendEmailResponse(success=True, message="Email sent successfully")


@router.get("/health", response_model=MailHealthResponse, summary="Email Service Health")
async def mail_health() -> MailHealthResponse:
    return MailHealthResponse(
        **check_email_health(),
        timestamp=datetime.now(UTC).isoformat(),
    )
