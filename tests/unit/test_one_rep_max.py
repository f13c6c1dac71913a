"""
Unit tests for 1RM math.

Covered:
- estimate_one_rep_max formula and intensity clamping
- parse_target_reps / suggest_weight
- detect_prs / latest_estimate_per_exercise
- best_set_estimate selection
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.schemas.one_rep_max import OneRepMaxHistoryEntry, PRRecord
from app.services.one_rep_max import (
    OneRepMaxEstimator,
    clamp_intensity,
    detect_prs,
    estimate_one_rep_max,
    latest_estimate_per_exercise,
    parse_target_reps,
    suggest_weight,
)
from tests.factories import make_exercise, make_set

pytestmark = pytest.mark.unit

D1 = datetime(2025, 1, 6, tzinfo=timezone.utc)


def _history(*estimates: float) -> list[OneRepMaxHistoryEntry]:
    return [
        OneRepMaxHistoryEntry(date=D1 + timedelta(days=7 * i), estimate=value)
        for i, value in enumerate(estimates)
    ]


# ---------------------------------------------------------------------------
# Estimate
# ---------------------------------------------------------------------------

def test_estimate_reference_value():
    assert estimate_one_rep_max(80, 8, 8) == pytest.approx(106.65, abs=0.01)


def test_estimate_at_failure_has_no_reserve_discount():
    assert estimate_one_rep_max(100, 1, 10) == pytest.approx(103.33)


def test_estimate_is_not_rounded():
    value = estimate_one_rep_max(80, 8, 8)
    assert value != round(value, 1)


@pytest.mark.parametrize("raw, expected", [(0, 1), (-3, 1), (1, 1), (7.9, 7), (10, 10), (14, 10)])
def test_clamp_intensity(raw, expected):
    assert clamp_intensity(raw) == expected


def test_out_of_range_intensity_is_clamped_in_estimate():
    assert estimate_one_rep_max(80, 8, 14) == estimate_one_rep_max(80, 8, 10)
    assert estimate_one_rep_max(80, 8, 0) == estimate_one_rep_max(80, 8, 1)


# ---------------------------------------------------------------------------
# Weight suggestion
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10", 10.0),
        ("8-12", 10.0),
        ("8 - 12", 10.0),
        (6, 6.0),
        ("AMRAP", 10.0),
        (None, 10.0),
        (0, 10.0),
        ("x-12", 10.0),
    ],
)
def test_parse_target_reps(raw, expected):
    assert parse_target_reps(raw) == expected


def test_suggest_weight_rounds_up_to_five():
    # 100 * 0.95 / 1.333 = 71.27
    assert suggest_weight(100, "8-12", 8) == 75.0
    # 100 / 1.333 = 75.02, just over a plate step
    assert suggest_weight(100, 10, 10) == 80.0


# ---------------------------------------------------------------------------
# PR detection
# ---------------------------------------------------------------------------

def test_detect_prs_reference_sequence():
    history = _history(10, 10, 12, 11, 15)
    prs = detect_prs("lib1_Bench%20Press", history)
    assert [pr.date for pr in prs] == [history[2].date, history[4].date]
    assert [pr.previous_best for pr in prs] == [10, 12]


def test_detect_prs_sorts_history_first():
    history = _history(10, 10, 12, 11, 15)
    shuffled = [history[4], history[0], history[3], history[2], history[1]]
    assert detect_prs("k", shuffled) == detect_prs("k", history)


def test_first_entry_is_never_a_pr():
    assert detect_prs("k", _history(100)) == []
    assert detect_prs("k", []) == []


def test_equal_estimate_is_not_a_pr():
    assert detect_prs("k", _history(10, 10.0)) == []


def test_detect_prs_accepts_naive_dates_as_utc():
    history = [
        OneRepMaxHistoryEntry(date=datetime(2025, 1, 13), estimate=12),
        OneRepMaxHistoryEntry(date=D1, estimate=10),
        OneRepMaxHistoryEntry(date=datetime(2025, 1, 20, tzinfo=timezone.utc), estimate=11),
    ]
    prs = detect_prs("k", history)
    assert [pr.estimate for pr in prs] == [12]
    assert prs[0].date == datetime(2025, 1, 13, tzinfo=timezone.utc)


def test_latest_estimate_per_exercise():
    prs = [
        PRRecord(exercise_key="a", date=D1, estimate=100, previous_best=90),
        PRRecord(exercise_key="a", date=D1 + timedelta(days=14), estimate=110, previous_best=100),
        PRRecord(exercise_key="b", date=D1 + timedelta(days=7), estimate=60, previous_best=55),
    ]
    latest = latest_estimate_per_exercise(prs)
    assert latest["a"].estimate == 110
    assert latest["b"].estimate == 60


# ---------------------------------------------------------------------------
# Best set
# ---------------------------------------------------------------------------

def test_best_set_estimate_picks_highest_valid_set():
    exercise = make_exercise(
        sets=[
            make_set(reps=10, weight=60, intensity=7),
            make_set(reps=5, weight=90, intensity=9),
            make_set(reps=3, weight=120, intensity="hard"),
            make_set(reps=0, weight=140, intensity=10),
        ]
    )
    value, achieved = OneRepMaxEstimator.best_set_estimate(exercise)
    assert value == pytest.approx(estimate_one_rep_max(90, 5, 9))
    assert achieved.weight == 90
    assert achieved.reps == 5
    assert achieved.set_number == 2


def test_best_set_estimate_none_without_usable_sets():
    exercise = make_exercise(sets=[make_set(reps=10, intensity=8), make_set(weight=50)])
    assert OneRepMaxEstimator.best_set_estimate(exercise) is None
