"""
Authentication Background Jobs

Periodically clears expired one-time passwords so that stale OTP values do not
linger in the users table. An expired OTP already fails verification with the
same error as a missing one, so clearing it changes nothing a caller can see.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from schoolhub.core.config import settings
from schoolhub.core.database import async_session_maker
from schoolhub.core.scheduler import register_job
from schoolhub.modules.users import repository

logger = logging.getLogger(__name__)

JOB_ID_CLEAR_EXPIRED_OTPS = "auth_clear_expired_otps"


async def clear_expired_otps() -> dict[str, Any]:
    """
    Null out every expired registration and password reset OTP pair.

    Returns:
        Counts of cleared pairs
    """
    now = datetime.now(UTC)

    async with async_session_maker() as db:
        result = await repository.clear_expired_otps(db, now)

    logger.info(
        f"Expired OTP cleanup: {result['registration_otps_cleared']} registration, "
        f"{result['reset_otps_cleared']} password reset"
    )
    return result


def register_auth_jobs() -> None:
    """Register the auth module's background jobs with the scheduler."""
    register_job(
        job_id=JOB_ID_CLEAR_EXPIRED_OTPS,
        func=clear_expired_otps,
        trigger=IntervalTrigger(minutes=settings.otp_cleanup_interval_minutes),
    )
