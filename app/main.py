"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.exceptions import (
    AmbiguousExerciseKeyError,
    EngineError,
    EstimateResetError,
    NoActiveSessionError,
    SessionStartError,
    StreakUpdateError,
)
from app.core.logging import setup_logging
from app.db.session import engine
from app.services.progress_cache import ProgressCache
from app.services.session_completion import ActiveSessionRegistry

settings = get_settings()
setup_logging(settings.log_format, settings.log_level.upper())

logger = logging.getLogger(__name__)

# Most specific first; anything else deriving from EngineError is a 500
EXCEPTION_STATUS: list[tuple[type[EngineError], int]] = [
    (StreakUpdateError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (SessionStartError, status.HTTP_400_BAD_REQUEST),
    (AmbiguousExerciseKeyError, status.HTTP_400_BAD_REQUEST),
    (NoActiveSessionError, status.HTTP_404_NOT_FOUND),
    (EstimateResetError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: log configuration; shutdown: dispose the engine pool."""
    # Tables are managed by Alembic (alembic upgrade head)
    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    yield
    await engine.dispose()


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    for exc_type, status_code in EXCEPTION_STATUS:
        if isinstance(exc, exc_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # Per-process state shared by requests
    app.state.progress_cache = ProgressCache(settings.progress_cache_ttl_seconds)
    app.state.active_sessions = ActiveSessionRegistry()

    # CORS: allow localhost in dev; in production use CORS_ORIGINS env (comma-separated)
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(EngineError, engine_error_handler)

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
