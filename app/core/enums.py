"""Shared enums for services and API."""

from enum import Enum


class StreakTransition(str, Enum):
    """What a completion did to the weekly streak."""

    STARTED = "started"  # First completion ever for the course
    SAME_WEEK = "same_week"
    EXTENDED = "extended"  # Previous week met the minimum
    RESET = "reset"  # Previous week fell short
    STALE = "stale"  # Completion belongs to a week before the stored one


class CompletionStep(str, Enum):
    """Steps of session completion that may fail without aborting it."""

    EXERCISE_HISTORY = "exercise_history"
    SESSION_HISTORY = "session_history"
    MUSCLE_VOLUME = "muscle_volume"
    ONE_REP_MAX = "one_rep_max"
    COURSE_PROGRESS = "course_progress"
