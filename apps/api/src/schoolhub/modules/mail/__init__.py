"""Mail module - transactional email endpoints."""

from schoolhub.modules.mail.router import router

__all__ = ["router"]
