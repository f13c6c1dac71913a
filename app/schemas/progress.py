"""Course progress, weekly streak and weekly volume schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.core.enums import StreakTransition
from app.schemas.exercise import ExercisePerformance


class CourseProgressRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    course_id: str
    total_sessions_completed: int = 0
    last_session_completed: str | None = None
    all_sessions_completed: list[str] = []
    last_activity: datetime | None = None


class WeeklyStreakRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    course_id: str
    current_streak: int = 0
    sessions_completed_this_week: int = 0
    week_start: str
    last_workout_date: datetime | None = None
    transition: StreakTransition | None = None


class WeeklyVolumeRead(BaseModel):
    user_id: str
    week_key: str
    volumes: dict[str, float]


class MuscleVolumeCalculateRequest(BaseModel):
    exercises: list[ExercisePerformance]


class MuscleVolumeCalculateResponse(BaseModel):
    volumes: dict[str, float]
