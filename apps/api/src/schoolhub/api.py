from fastapi import APIRouter

from schoolhub.modules.auth import router as auth_router
from schoolhub.modules.mail import router as mail_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(mail_router, prefix="/mail", tags=["Mail"])
