"""Engine exceptions. Only a few of these ever reach the user."""


class EngineError(Exception):
    """Base class for session performance engine errors."""


class PersistenceError(EngineError):
    """The store rejected or failed a read/write."""


class SessionStartError(EngineError):
    """A workout could not be started."""


class NoActiveSessionError(EngineError):
    """No workout is in progress for the user."""


class StreakUpdateError(EngineError):
    """Updating the weekly streak failed; surfaced so the caller can retry."""

    def __init__(self, user_id: str, course_id: str, cause: BaseException | None = None):
        self.user_id = user_id
        self.course_id = course_id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Streak update failed for user={user_id} course={course_id}{detail}")


class EstimateResetError(EngineError):
    """Clearing a 1RM estimate failed."""


class AmbiguousExerciseKeyError(EngineError, ValueError):
    """An exercise key string cannot be split back into library id and name."""
