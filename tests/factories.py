"""Builders and test doubles shared by unit and integration tests."""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from app.core.exceptions import PersistenceError
from app.repositories.performance_store import SqlAlchemyPerformanceStore
from app.schemas.exercise import ExercisePerformance, SetRecord
from app.schemas.workout import WorkoutSession

# Monday 2025-03-03 is the first day of ISO week 2025-W10
WEEK_10_MONDAY = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock returning a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FlakyStore(SqlAlchemyPerformanceStore):
    """SQLite-backed store whose listed operations raise PersistenceError."""

    def __init__(self, session_factory, fail_on: Iterable[str] = ()):
        super().__init__(session_factory)
        self.fail_on = set(fail_on)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise PersistenceError(f"{operation} unavailable")

    async def increment_weekly_muscle_volume(self, *args, **kwargs):
        self._check("increment_weekly_muscle_volume")
        return await super().increment_weekly_muscle_volume(*args, **kwargs)

    async def add_exercise_history(self, *args, **kwargs):
        self._check("add_exercise_history")
        return await super().add_exercise_history(*args, **kwargs)

    async def put_session_history(self, *args, **kwargs):
        self._check("put_session_history")
        return await super().put_session_history(*args, **kwargs)

    async def append_one_rep_max_record(self, *args, **kwargs):
        self._check("append_one_rep_max_record")
        return await super().append_one_rep_max_record(*args, **kwargs)

    async def clear_one_rep_max_estimate(self, *args, **kwargs):
        self._check("clear_one_rep_max_estimate")
        return await super().clear_one_rep_max_estimate(*args, **kwargs)

    async def record_course_completion(self, *args, **kwargs):
        self._check("record_course_completion")
        return await super().record_course_completion(*args, **kwargs)

    async def save_weekly_streak(self, *args, **kwargs):
        self._check("save_weekly_streak")
        return await super().save_weekly_streak(*args, **kwargs)


def make_set(reps=None, weight=None, intensity=None) -> SetRecord:
    return SetRecord(reps=reps, weight=weight, intensity=intensity)


def make_exercise(
    exercise_id: str = "ex-bench",
    *,
    library_id: str | None = "lib1",
    exercise_name: str | None = "Bench Press",
    sets: list[SetRecord] | None = None,
    muscle_activation: dict | None = None,
) -> ExercisePerformance:
    return ExercisePerformance(
        exercise_id=exercise_id,
        exercise_name=exercise_name,
        library_id=library_id,
        sets=sets if sets is not None else [],
        muscle_activation=muscle_activation or {},
    )


def make_session(
    session_id: str = "s1",
    *,
    start_time: datetime = WEEK_10_MONDAY,
    completed_at: datetime | None = None,
    exercises: list[ExercisePerformance] | None = None,
    user_id: str = "u1",
    course_id: str = "c1",
) -> WorkoutSession:
    return WorkoutSession(
        session_id=session_id,
        course_id=course_id,
        user_id=user_id,
        session_name="Push Day",
        start_time=start_time,
        completed_at=completed_at,
        exercises=exercises if exercises is not None else [],
    )


def bench_press(weight=80, reps=8, intensity=8, sets: int = 3) -> ExercisePerformance:
    return make_exercise(
        sets=[make_set(reps=reps, weight=weight, intensity=intensity) for _ in range(sets)],
        muscle_activation={"chest": 100, "triceps": 50},
    )
