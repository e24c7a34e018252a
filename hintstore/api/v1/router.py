from fastapi import APIRouter
from hintstore.api.v1 import health, notification_hints
from hintstore.core.config import settings

api_router = APIRouter(prefix=settings.API_V1_PREFIX)

api_router.include_router(health.router, tags=['health'])
api_router.include_router(notification_hints.router)
