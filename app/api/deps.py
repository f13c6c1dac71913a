"""FastAPI dependencies that build the engine services for a request."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings, get_settings
from app.db.session import async_session_maker
from app.repositories.performance_store import PerformanceStore, SqlAlchemyPerformanceStore
from app.services.course_progress import CourseProgressService
from app.services.exercise_history import ExerciseHistoryRecorder
from app.services.muscle_volume import MuscleVolumeDistributor
from app.services.one_rep_max import OneRepMaxEstimator
from app.services.progress_cache import ProgressCache
from app.services.session_completion import ActiveSessionRegistry, SessionCompletionOrchestrator
from app.services.streak import StreakTracker


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_session_maker


def get_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> PerformanceStore:
    return SqlAlchemyPerformanceStore(session_factory)


def get_progress_cache(request: Request) -> ProgressCache:
    return request.app.state.progress_cache


def get_active_sessions(request: Request) -> ActiveSessionRegistry:
    return request.app.state.active_sessions


def get_volume_distributor(store: PerformanceStore = Depends(get_store)) -> MuscleVolumeDistributor:
    return MuscleVolumeDistributor(store)


def get_one_rep_max_estimator(store: PerformanceStore = Depends(get_store)) -> OneRepMaxEstimator:
    return OneRepMaxEstimator(store)


def get_streak_tracker(store: PerformanceStore = Depends(get_store)) -> StreakTracker:
    return StreakTracker(store)


def get_history_recorder(store: PerformanceStore = Depends(get_store)) -> ExerciseHistoryRecorder:
    return ExerciseHistoryRecorder(store)


def get_course_progress_service(
    store: PerformanceStore = Depends(get_store),
    cache: ProgressCache = Depends(get_progress_cache),
) -> CourseProgressService:
    return CourseProgressService(store, cache)


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    history: ExerciseHistoryRecorder = Depends(get_history_recorder),
    volumes: MuscleVolumeDistributor = Depends(get_volume_distributor),
    one_rep_max: OneRepMaxEstimator = Depends(get_one_rep_max_estimator),
    progress: CourseProgressService = Depends(get_course_progress_service),
    streak: StreakTracker = Depends(get_streak_tracker),
    active_sessions: ActiveSessionRegistry = Depends(get_active_sessions),
) -> SessionCompletionOrchestrator:
    return SessionCompletionOrchestrator(
        settings=settings,
        history=history,
        volumes=volumes,
        one_rep_max=one_rep_max,
        progress=progress,
        streak=streak,
        active_sessions=active_sessions,
    )
