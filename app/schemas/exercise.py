"""Exercise identity and per-exercise performance schemas."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import UNKNOWN_EXERCISE_NAME, UNKNOWN_LIBRARY_ID
from app.core.exceptions import AmbiguousExerciseKeyError

KEY_SEPARATOR = "_"


def _escape(part: str) -> str:
    # quote() leaves "_" alone, so escape the separator explicitly
    return quote(part, safe="").replace(KEY_SEPARATOR, "%5F")


class ExerciseKey(BaseModel):
    """Structured (library id, exercise name) identity of a library exercise.

    The string form escapes both parts so names containing "_" survive a
    round trip. Legacy keys built by plain concatenation are only accepted when
    they contain exactly one separator.
    """

    model_config = ConfigDict(frozen=True)

    library_id: str
    exercise_name: str

    def serialize(self) -> str:
        return f"{_escape(self.library_id)}{KEY_SEPARATOR}{_escape(self.exercise_name)}"

    def __str__(self) -> str:
        return self.serialize()

    @classmethod
    def parse(cls, raw: str) -> ExerciseKey:
        parts = raw.split(KEY_SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise AmbiguousExerciseKeyError(
                f"Exercise key {raw!r} does not split into library id and exercise name"
            )
        return cls(library_id=unquote(parts[0]), exercise_name=unquote(parts[1]))

    @property
    def is_resolved(self) -> bool:
        return (
            bool(self.library_id)
            and bool(self.exercise_name)
            and self.library_id != UNKNOWN_LIBRARY_ID
            and self.exercise_name != UNKNOWN_EXERCISE_NAME
        )


class SetRecord(BaseModel):
    """One performed set. Values arrive as typed in the client, so anything goes."""

    reps: str | int | float | None = None
    weight: str | int | float | None = None
    intensity: Any = None

    model_config = ConfigDict(extra="allow")


class ExercisePerformance(BaseModel):
    exercise_id: str
    exercise_name: str | None = None
    library_id: str | None = None
    sets: list[SetRecord] = []
    # muscle -> activation percentage (0-100), supplied by the exercise library
    muscle_activation: dict[str, Any] = Field(default_factory=dict)
    # Objective reps from the program, e.g. "8-12"; used for weight suggestions
    target_reps: str | None = None

    def exercise_key(self) -> ExerciseKey | None:
        """Structured key, or None when the library could not resolve the exercise."""
        if not self.library_id or not self.exercise_name:
            return None
        key = ExerciseKey(library_id=self.library_id, exercise_name=self.exercise_name)
        return key if key.is_resolved else None
