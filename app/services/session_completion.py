"""Workout lifecycle and session completion.

Completion runs every step in order against one finished session. Analytics
steps (history, muscle volume, 1RM, course progress) favour availability: a
failure is logged, reported in the result's `errors` and the remaining steps
still run. The streak step favours correctness and its failure propagates.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

from app.core.config import Settings
from app.core.enums import CompletionStep
from app.core.exceptions import NoActiveSessionError, SessionStartError
from app.core.week import WeekKeyFunc, get_monday_week
from app.schemas.exercise import ExercisePerformance
from app.schemas.one_rep_max import PRRecord
from app.schemas.workout import (
    CourseMeta,
    ExerciseDataUpdate,
    ExerciseStats,
    SessionCompletionResult,
    SessionStartRequest,
    SessionStats,
    StepError,
    WorkoutSession,
)
from app.services.course_progress import CourseProgressService
from app.services.exercise_history import ExerciseHistoryRecorder
from app.services.muscle_volume import (
    MuscleVolumeDistributor,
    has_activation_data,
    should_track_muscle_volume,
)
from app.services.one_rep_max import OneRepMaxEstimator
from app.services.streak import StreakTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")


def duration_minutes(start_time: datetime, completed_at: datetime) -> int:
    """Whole minutes between start and completion, half rounded up, never negative."""
    if start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)
    if completed_at.tzinfo is None:
        completed_at = completed_at.replace(tzinfo=timezone.utc)
    minutes = (completed_at - start_time).total_seconds() / 60
    return max(0, math.floor(minutes + 0.5))


def calculate_stats(session: WorkoutSession) -> SessionStats:
    return SessionStats(
        total_sets=sum(len(ex.sets) for ex in session.exercises),
        total_exercises=len(session.exercises),
        duration_minutes=session.duration_minutes or 0,
        exercises=[
            ExerciseStats(
                exercise_id=ex.exercise_id,
                exercise_name=ex.exercise_name,
                sets_count=len(ex.sets),
            )
            for ex in session.exercises
        ],
    )


class ActiveSessionRegistry:
    """Workouts in progress, one per user (the device-local "current session")."""

    def __init__(self) -> None:
        self._sessions: dict[str, WorkoutSession] = {}

    def get(self, user_id: str) -> WorkoutSession | None:
        return self._sessions.get(user_id)

    def put(self, session: WorkoutSession) -> None:
        self._sessions[session.user_id] = session

    def pop(self, user_id: str) -> WorkoutSession | None:
        return self._sessions.pop(user_id, None)


class SessionCompletionOrchestrator:
    def __init__(
        self,
        *,
        settings: Settings,
        history: ExerciseHistoryRecorder,
        volumes: MuscleVolumeDistributor,
        one_rep_max: OneRepMaxEstimator,
        progress: CourseProgressService,
        streak: StreakTracker,
        active_sessions: ActiveSessionRegistry | None = None,
        clock: Callable[[], datetime] | None = None,
        week_key: WeekKeyFunc = get_monday_week,
    ):
        self.settings = settings
        self.history = history
        self.volumes = volumes
        self.one_rep_max = one_rep_max
        self.progress = progress
        self.streak = streak
        self.active_sessions = active_sessions if active_sessions is not None else ActiveSessionRegistry()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.week_key = week_key

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self, request: SessionStartRequest) -> WorkoutSession:
        if not request.user_id or not request.course_id or not request.session_id:
            raise SessionStartError("user_id, course_id and session_id are required to start a workout")
        session = WorkoutSession(
            session_id=request.session_id,
            course_id=request.course_id,
            user_id=request.user_id,
            session_name=request.session_name,
            start_time=self.clock(),
        )
        self.active_sessions.put(session)
        logger.info("Session started", extra={"user_id": request.user_id, "session_id": request.session_id})
        return session

    def get_active_session(self, user_id: str) -> WorkoutSession:
        session = self.active_sessions.get(user_id)
        if session is None:
            raise NoActiveSessionError(f"No active session for user {user_id}")
        return session

    def record_exercise(self, user_id: str, update: ExerciseDataUpdate) -> WorkoutSession:
        """Replace the sets of an exercise in the active session, adding the exercise if new."""
        session = self.get_active_session(user_id)
        exercises = list(session.exercises)
        performance = ExercisePerformance(**update.model_dump())
        for index, existing in enumerate(exercises):
            if existing.exercise_id == update.exercise_id:
                exercises[index] = performance
                break
        else:
            exercises.append(performance)
        session = session.model_copy(update={"exercises": exercises})
        self.active_sessions.put(session)
        return session

    def cancel_session(self, user_id: str) -> bool:
        cancelled = self.active_sessions.pop(user_id) is not None
        if cancelled:
            logger.info("Session cancelled", extra={"user_id": user_id})
        return cancelled

    async def complete_active_session(self, user_id: str, course: CourseMeta) -> SessionCompletionResult:
        session = self.get_active_session(user_id)
        result = await self.complete_session(session, course)
        self.active_sessions.pop(user_id)
        return result

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        step: CompletionStep,
        errors: list[StepError],
        session: WorkoutSession,
        action: Callable[[], Awaitable[T]],
        default: T,
    ) -> T:
        try:
            return await action()
        except Exception as exc:
            logger.error(
                "Error in completion step %s",
                step.value,
                exc_info=True,
                extra={"user_id": session.user_id, "session_id": session.session_id, "step": step.value},
            )
            errors.append(StepError(step=step, message=str(exc)))
            return default

    def finalize(self, session: WorkoutSession) -> WorkoutSession:
        completed_at = session.completed_at or self.clock()
        return session.model_copy(
            update={
                "completed_at": completed_at,
                "duration_minutes": duration_minutes(session.start_time, completed_at),
            }
        )

    async def complete_session(self, session: WorkoutSession, course: CourseMeta) -> SessionCompletionResult:
        session = self.finalize(session)
        user_id = session.user_id
        stats = calculate_stats(session)
        errors: list[StepError] = []

        muscle_volumes: dict[str, float] = {}
        if should_track_muscle_volume(
            course.discipline, self.settings.volume_tracked_disciplines
        ) and has_activation_data(session.exercises):
            muscle_volumes = self.volumes.compute_session_muscle_volumes(session.exercises)
        else:
            logger.debug("Muscle volume not tracked for discipline %r", course.discipline)

        await self._attempt(
            CompletionStep.EXERCISE_HISTORY,
            errors,
            session,
            lambda: self.history.add_exercise_history(user_id, session),
            0,
        )
        await self._attempt(
            CompletionStep.SESSION_HISTORY,
            errors,
            session,
            lambda: self.history.add_session_history(user_id, session, course.name),
            None,
        )

        if muscle_volumes:
            week_key = self.week_key(session.completed_at)
            await self._attempt(
                CompletionStep.MUSCLE_VOLUME,
                errors,
                session,
                lambda: self.volumes.merge_into_weekly_ledger(user_id, week_key, muscle_volumes),
                None,
            )

        personal_records: list[PRRecord] = await self._attempt(
            CompletionStep.ONE_REP_MAX,
            errors,
            session,
            lambda: self.one_rep_max.update_estimates_after_session(
                user_id, session.exercises, session.completed_at
            ),
            [],
        )

        progress = await self._attempt(
            CompletionStep.COURSE_PROGRESS,
            errors,
            session,
            lambda: self.progress.record_completion(
                user_id,
                session.course_id,
                session.session_id,
                session.completed_at,
                mark_completed=bool(session.exercises),
            ),
            None,
        )

        minimum_sessions = course.minimum_sessions_per_week or self.settings.default_minimum_sessions_per_week
        streak = await self.streak.record_completion(
            user_id, session.course_id, session.completed_at, minimum_sessions
        )

        logger.info(
            "Session completed: %d sets, %d exercises, %d muscles, %d PRs, %d errors",
            stats.total_sets,
            stats.total_exercises,
            len(muscle_volumes),
            len(personal_records),
            len(errors),
            extra={"user_id": user_id, "session_id": session.session_id},
        )
        return SessionCompletionResult(
            session=session,
            stats=stats,
            muscle_volumes=muscle_volumes,
            personal_records=personal_records,
            progress=progress,
            streak=streak,
            errors=errors,
        )
