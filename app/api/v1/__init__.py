"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    health,
    muscle_volume,
    one_rep_max,
    progress,
    sessions,
    streak,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(muscle_volume.router, prefix="/muscle-volume", tags=["muscle-volume"])
api_router.include_router(one_rep_max.router, prefix="/one-rep-max", tags=["one-rep-max"])
api_router.include_router(streak.router, prefix="/streak", tags=["streak"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
