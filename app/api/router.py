"""
Main API router
"""
from fastapi import APIRouter

from app.api.v1 import (
    health,
    auth,
    leaves,
    notifications,
    version,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(leaves.router, prefix="/leave", tags=["leave"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
