"""Workout session, completion request and completion result schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.core.enums import CompletionStep
from app.schemas.exercise import ExercisePerformance, SetRecord
from app.schemas.one_rep_max import PRRecord
from app.schemas.progress import CourseProgressRead, WeeklyStreakRead


class WorkoutSession(BaseModel):
    """A workout from start to completion. Frozen by completion (see finalized copy)."""

    session_id: str
    course_id: str
    user_id: str
    session_name: str | None = None
    start_time: datetime
    completed_at: datetime | None = None
    duration_minutes: int | None = None
    exercises: list[ExercisePerformance] = []


class CourseMeta(BaseModel):
    course_id: str
    name: str | None = None
    discipline: str | None = None
    minimum_sessions_per_week: int | None = Field(default=None, ge=1)


class SessionStartRequest(BaseModel):
    user_id: str
    course_id: str
    session_id: str
    session_name: str | None = None


class ExerciseDataUpdate(BaseModel):
    exercise_id: str
    exercise_name: str | None = None
    library_id: str | None = None
    sets: list[SetRecord] = []
    muscle_activation: dict[str, float | str] = {}
    target_reps: str | None = None


class ActiveSessionCompleteRequest(BaseModel):
    course: CourseMeta


class SessionCompleteRequest(BaseModel):
    session: WorkoutSession
    course: CourseMeta


class ExerciseStats(BaseModel):
    exercise_id: str
    exercise_name: str | None = None
    sets_count: int


class SessionStats(BaseModel):
    total_sets: int
    total_exercises: int
    duration_minutes: int
    exercises: list[ExerciseStats] = []


class StepError(BaseModel):
    """A non-critical completion step that failed and was skipped."""

    step: CompletionStep
    message: str


class SessionCompletionResult(BaseModel):
    session: WorkoutSession
    stats: SessionStats
    muscle_volumes: dict[str, float] = {}
    personal_records: list[PRRecord] = []
    progress: CourseProgressRead | None = None
    streak: WeeklyStreakRead
    errors: list[StepError] = []
