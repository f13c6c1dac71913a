"""Health check endpoints for load balancers and monitoring."""

import logging
import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.deps import get_session_factory
from app.core.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health():
    """Liveness check. Includes built_at if BACKEND_BUILT_AT env is set."""
    payload: dict = {"status": "ok", "service": get_settings().app_name}
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
async def readiness(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Readiness: app + store connectivity."""
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Readiness check failed", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": str(e)},
        )
    return {"status": "ok", "database": "connected"}
