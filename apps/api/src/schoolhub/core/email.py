"""
Email Service using Resend

Handles sending transactional email, including the one-time passwords used by
the registration and password reset flows.
"""

import asyncio
import logging
from html import escape
from typing import Protocol

import resend

from schoolhub.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Out-of-band message delivery used by the auth flows."""

    async def send(self, to: str, subject: str, body: str) -> bool:
        """Deliver a message. Returns False if delivery failed."""
        ...


async def send_email(
    to_email: str,
    subject: str,
    html_content: str | None = None,
    text_content: str | None = None,
    settings: Settings | None = None,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email
        text_content: Plain text content of the email
        settings: Settings providing the API key and sender address

    Returns:
        True if email was sent successfully

    Raises:
        ValueError: If neither html_content nor text_content is given
    """
    if not html_content and not text_content:
        raise ValueError("Either html_content or text_content is required")

    settings = settings or default_settings

    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    resend.api_key = settings.resend_api_key

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
        }
        if html_content:
            params["html"] = html_content
        if text_content:
            params["text"] = text_content

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def render_message_html(subject: str, body: str) -> str:
    """Wrap a plain text message in the standard SchoolHub email layout."""
    safe_subject = escape(subject)
    safe_body = "<br>".join(escape(line) for line in body.splitlines())

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #1a365d; margin-bottom: 24px; }}
            .message-box {{ background-color: #f3f4f6; padding: 16px; border-radius: 8px; margin: 16px 0; font-size: 16px; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">{safe_subject}</h1>

            <div class="message-box">
                {safe_body}
            </div>

            <div class="footer">
                <p>If you didn't request this, you can safely ignore this email.</p>
                <p>SchoolHub - School Management System</p>
            </div>
        </div>
    </body>
    </html>
    """


class EmailNotifier:
    """Notifier that delivers messages as email through Resend."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    async def send(self, to: str, subject: str, body: str) -> bool:
        return await send_email(
            to_email=to,
            subject=subject,
            html_content=render_message_html(subject, body),
            text_content=body,
            settings=self.settings,
        )


def check_email_health() -> dict[str, str | bool]:
    """Report whether the email service is configured to deliver mail."""
    return {
        "status": "healthy",
        "delivery_enabled": bool(default_settings.resend_api_key),
    }
