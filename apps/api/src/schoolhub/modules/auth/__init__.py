"""
Authentication module.

Registration with emailed OTP, OTP verification, login, password reset and
logout. See service.py for the credential state machine.
"""

from schoolhub.modules.auth.jobs import register_auth_jobs
from schoolhub.modules.auth.router import router
from schoolhub.modules.auth.service import AuthService

__all__ = ["router", "register_auth_jobs", "AuthService"]
