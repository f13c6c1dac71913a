"""
Shared fixtures.

Strategy:
- Storage tests run the real SqlAlchemyPerformanceStore against an in-memory
  SQLite database (aiosqlite + StaticPool, so every session sees the same
  connection). Tables come from Base.metadata.create_all.
- Failure-policy tests use FlakyStore, the same store with selected writes
  configured to raise PersistenceError.
- The HTTP client is the real application with get_session_factory overridden
  to the SQLite session factory; no PostgreSQL connection is ever made.
- Time is injected through FixedClock so week boundaries are deterministic.
"""

from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 - register all tables on Base.metadata
from app.api.deps import get_session_factory
from app.core.config import Settings
from app.db.base import Base
from app.main import create_application
from app.repositories.performance_store import SqlAlchemyPerformanceStore
from app.schemas.workout import CourseMeta
from app.services.course_progress import CourseProgressService
from app.services.exercise_history import ExerciseHistoryRecorder
from app.services.muscle_volume import MuscleVolumeDistributor
from app.services.one_rep_max import OneRepMaxEstimator
from app.services.progress_cache import ProgressCache
from app.services.session_completion import ActiveSessionRegistry, SessionCompletionOrchestrator
from app.services.streak import StreakTracker
from tests.factories import WEEK_10_MONDAY, FixedClock, FlakyStore


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlAlchemyPerformanceStore:
    return SqlAlchemyPerformanceStore(session_factory)


@pytest.fixture
def flaky_store(session_factory):
    """Factory: flaky_store("save_weekly_streak", ...) -> FlakyStore."""

    def build(*fail_on: str) -> FlakyStore:
        return FlakyStore(session_factory, fail_on)

    return build


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(WEEK_10_MONDAY + timedelta(minutes=45))


@pytest.fixture
def build_orchestrator(settings, clock):
    """Factory building an orchestrator over the given store."""

    def build(store) -> SessionCompletionOrchestrator:
        return SessionCompletionOrchestrator(
            settings=settings,
            history=ExerciseHistoryRecorder(store),
            volumes=MuscleVolumeDistributor(store),
            one_rep_max=OneRepMaxEstimator(store, clock=clock),
            progress=CourseProgressService(store, ProgressCache(settings.progress_cache_ttl_seconds)),
            streak=StreakTracker(store),
            active_sessions=ActiveSessionRegistry(),
            clock=clock,
        )

    return build


@pytest.fixture
def orchestrator(build_orchestrator, store) -> SessionCompletionOrchestrator:
    return build_orchestrator(store)


@pytest.fixture
def strength_course() -> CourseMeta:
    return CourseMeta(
        course_id="c1",
        name="Strength Block",
        discipline="Fuerza - Hipertrofia",
        minimum_sessions_per_week=3,
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Real application; storage goes to the in-memory SQLite database."""
    application = create_application()
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(
        transport=ASGITransport(app=application),
        base_url="http://test",
    ) as ac:
        yield ac
