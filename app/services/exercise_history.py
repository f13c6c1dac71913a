"""Exercise and session history written when a session completes."""

from __future__ import annotations

import logging
from typing import Any

from app.core.constants import DEFAULT_COURSE_NAME, DEFAULT_SESSION_NAME
from app.repositories.performance_store import PerformanceStore
from app.schemas.exercise import SetRecord
from app.schemas.workout import WorkoutSession
from app.services.set_classifier import has_performance_data

logger = logging.getLogger(__name__)

EXERCISE_HISTORY_LIMIT = 50


def populated_sets(sets: list[SetRecord]) -> list[dict[str, Any]]:
    """Sets with reps or weight, as plain dicts without empty fields."""
    return [
        {k: v for k, v in s.model_dump().items() if v is not None and v != ""}
        for s in sets
        if has_performance_data(s)
    ]


class ExerciseHistoryRecorder:
    def __init__(self, store: PerformanceStore):
        self.store = store

    async def add_exercise_history(self, user_id: str, session: WorkoutSession) -> int:
        """One entry per resolved exercise with populated sets. Returns how many were written."""
        written = 0
        for exercise in session.exercises:
            key = exercise.exercise_key()
            if key is None:
                logger.info(
                    "Skipping exercise %s - unresolved library id or name",
                    exercise.exercise_id,
                    extra={"session_id": session.session_id},
                )
                continue
            sets = populated_sets(exercise.sets)
            if not sets:
                continue
            await self.store.add_exercise_history(
                user_id, key.serialize(), session.session_id, session.completed_at, sets
            )
            written += 1
        return written

    @staticmethod
    def session_history_record(session: WorkoutSession, course_name: str | None = None) -> dict[str, Any]:
        exercises: dict[str, Any] = {}
        for exercise in session.exercises:
            key = exercise.exercise_key()
            if key is None:
                continue
            sets = populated_sets(exercise.sets)
            if sets:
                exercises[key.serialize()] = {"exercise_name": exercise.exercise_name, "sets": sets}
        return {
            "session_id": session.session_id,
            "course_id": session.course_id,
            "course_name": course_name or DEFAULT_COURSE_NAME,
            "session_name": session.session_name or DEFAULT_SESSION_NAME,
            "completed_at": session.completed_at,
            "duration_minutes": session.duration_minutes or 0,
            "exercises": exercises,
        }

    async def add_session_history(self, user_id: str, session: WorkoutSession, course_name: str | None = None) -> None:
        await self.store.put_session_history(user_id, self.session_history_record(session, course_name))

    async def get_exercise_history(self, user_id: str, exercise_key: str) -> list[dict]:
        return await self.store.list_exercise_history(user_id, exercise_key, EXERCISE_HISTORY_LIMIT)

    async def get_session_history(self, user_id: str, session_id: str) -> dict[str, Any] | None:
        return await self.store.get_session_history(user_id, session_id)
