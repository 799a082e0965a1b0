from fastapi import APIRouter

from src.api.health.router import router as health_router
from src.api.profile.router import router as profile_router
from src.api.transform.router import router as transform_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(profile_router)
api_router.include_router(transform_router)
