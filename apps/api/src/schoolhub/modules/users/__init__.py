"""
Users module - User credential storage.
"""

from schoolhub.modules.users.models import User
from schoolhub.modules.users.repository import UserRepository, UserStore

__all__ = ["User", "UserRepository", "UserStore"]
