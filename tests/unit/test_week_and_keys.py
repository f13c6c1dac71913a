"""Unit tests for Monday week keys and structured exercise keys."""

from datetime import date, datetime, timezone

import pytest

from app.core.exceptions import AmbiguousExerciseKeyError
from app.core.week import get_monday_week, monday_of, week_bounds
from app.schemas.exercise import ExerciseKey
from tests.factories import make_exercise

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Week keys
# ---------------------------------------------------------------------------

def test_every_day_of_a_week_maps_to_the_same_key():
    keys = {get_monday_week(date(2025, 3, day)) for day in range(3, 10)}
    assert keys == {"2025-W10"}


def test_sunday_belongs_to_the_preceding_monday():
    assert get_monday_week(datetime(2025, 3, 9, 23, 59, tzinfo=timezone.utc)) == "2025-W10"
    assert get_monday_week(datetime(2025, 3, 10, 0, 0, tzinfo=timezone.utc)) == "2025-W11"


def test_year_boundary_uses_the_iso_year_of_the_monday():
    # Monday 2024-12-30 starts ISO week 1 of 2025
    assert get_monday_week(date(2025, 1, 1)) == "2025-W01"
    assert get_monday_week(date(2024, 12, 29)) == "2024-W52"


def test_week_keys_order_lexicographically():
    earlier = get_monday_week(date(2024, 12, 23))
    later = get_monday_week(date(2025, 1, 6))
    assert earlier < later


def test_monday_of_and_week_bounds():
    assert monday_of(date(2025, 3, 7)) == date(2025, 3, 3)
    assert week_bounds("2025-W10") == (date(2025, 3, 3), date(2025, 3, 9))


# ---------------------------------------------------------------------------
# Exercise keys
# ---------------------------------------------------------------------------

def test_exercise_key_round_trips_names_with_separator():
    key = ExerciseKey(library_id="lib_core", exercise_name="Push_Up Variation")
    serialized = key.serialize()
    assert serialized.count("_") == 1
    assert ExerciseKey.parse(serialized) == key


def test_legacy_key_with_single_separator_parses():
    assert ExerciseKey.parse("lib1_Bench Press") == ExerciseKey(library_id="lib1", exercise_name="Bench Press")


@pytest.mark.parametrize("raw", ["lib_core_Push_Up", "no-separator", "_Bench", "lib1_"])
def test_ambiguous_key_raises(raw):
    with pytest.raises(AmbiguousExerciseKeyError):
        ExerciseKey.parse(raw)


@pytest.mark.parametrize(
    "library_id, exercise_name",
    [(None, "Bench Press"), ("lib1", None), ("unknown", "Bench Press"), ("lib1", "Unknown Exercise")],
)
def test_unresolved_exercise_has_no_key(library_id, exercise_name):
    exercise = make_exercise(library_id=library_id, exercise_name=exercise_name)
    assert exercise.exercise_key() is None
