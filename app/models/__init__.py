"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.history import ExerciseHistoryEntry, SessionHistory
from app.models.one_rep_max import OneRepMaxEstimate, OneRepMaxRecord
from app.models.progress import CompletedSession, CourseProgress, WeeklyStreak
from app.models.volume import WeeklyMuscleVolume

__all__ = [
    "CompletedSession",
    "CourseProgress",
    "ExerciseHistoryEntry",
    "OneRepMaxEstimate",
    "OneRepMaxRecord",
    "SessionHistory",
    "WeeklyMuscleVolume",
    "WeeklyStreak",
]
