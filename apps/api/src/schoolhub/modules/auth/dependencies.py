"""FastAPI dependencies wiring the auth service to its collaborators."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.config import settings
from schoolhub.core.database import get_db
from schoolhub.core.email import EmailNotifier, Notifier
from schoolhub.modules.auth.service import AuthService
from schoolhub.modules.users.repository import UserRepository, UserStore


async def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return UserRepository(db)


async def get_notifier() -> Notifier:
    return EmailNotifier(settings)


async def get_auth_service(
    store: UserStore = Depends(get_user_store),
    notifier: Notifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(store=store, notifier=notifier, settings=settings)
